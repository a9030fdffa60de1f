"""
dugsi/services.py
─────────────────
Entry point for pages that show the Dugsi family dashboard.

get_dashboard_data(registrations, spec=None, sort=None, now=None)
    Runs the whole pipeline (aggregate → classify → filter → sort) over the
    registrations a page fetched and returns a dict that can be passed
    straight into template context.
"""

import logging

from .family import ensure_sequence, group_registrations_by_family
from .filters import detect_search_type, filter_families, filter_options, sort_families, tab_counts
from .stats import dashboard_stats
from .status import billing_status, family_status
from .types import FilterSpec, Registration

logger = logging.getLogger(__name__)


def family_row(family):
    """Per-family extras the grid and table views display next to the Family."""
    return {
        'family':  family,
        'status':  family_status(family),
        'billing': [billing_status(m) for m in family.members],
    }


def get_dashboard_data(registrations, spec=None, sort=None, now=None):
    spec = spec or FilterSpec()
    registrations = ensure_sequence(registrations, Registration, 'registrations')
    search_type = detect_search_type(spec.search_query)

    families = group_registrations_by_family(registrations)
    visible = filter_families(families, spec, now=now)
    if sort:
        visible = sort_families(visible, sort)

    logger.info(
        'Dashboard: %d families, %d visible (tab=%s, search=%s)',
        len(families), len(visible), spec.tab, search_type,
    )

    return {
        'families':          families,
        'filtered_families': visible,
        'rows':              [family_row(f) for f in visible],
        'tab_counts':        tab_counts(families),
        'stats':             dashboard_stats(families),
        'search_type':       search_type,
        'filter_options':    filter_options(registrations),
        'filters':           spec,
    }
