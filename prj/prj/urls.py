"""
URL configuration for prj project.

The dugsi app exposes no routes of its own: dashboard pages consume
dugsi.services.get_dashboard_data() and render it themselves.
"""

urlpatterns = []
