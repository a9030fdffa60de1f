"""
dugsi/types.py
──────────────
Value types shared by the whole family pipeline.

Registrations arrive already flattened (one per child, parent contact and
billing fields embedded).  Everything else here is derived: Families are
recomputed on every aggregation call and never stored.

Enumerations use Django's TextChoices so the same values can back form
fields and template labels.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from django.db import models


# ── Enumerations ──────────────────────────────────────────────────────────────

class SubscriptionStatus(models.TextChoices):
    INCOMPLETE         = 'incomplete',         'Incomplete'
    INCOMPLETE_EXPIRED = 'incomplete_expired', 'Incomplete (expired)'
    TRIALING           = 'trialing',           'Trialing'
    ACTIVE             = 'active',             'Active'
    PAST_DUE           = 'past_due',           'Past due'
    CANCELED           = 'canceled',           'Canceled'
    UNPAID             = 'unpaid',             'Unpaid'
    PAUSED             = 'paused',             'Paused'


class EnrollmentStatus(models.TextChoices):
    """Lifecycle status of a child's program profile."""
    REGISTERED = 'REGISTERED', 'Registered'
    ENROLLED   = 'ENROLLED',   'Enrolled'
    ON_LEAVE   = 'ON_LEAVE',   'On leave'
    WITHDRAWN  = 'WITHDRAWN',  'Withdrawn'
    COMPLETED  = 'COMPLETED',  'Completed'
    SUSPENDED  = 'SUSPENDED',  'Suspended'


# Members in one of these states count towards a family being "active".
ACTIVE_ENROLLMENT_STATUSES = frozenset({
    EnrollmentStatus.ENROLLED,
    EnrollmentStatus.REGISTERED,
})


class Shift(models.TextChoices):
    MORNING   = 'MORNING',   'Morning'
    AFTERNOON = 'AFTERNOON', 'Afternoon'


class Gender(models.TextChoices):
    MALE   = 'MALE',   'Male'
    FEMALE = 'FEMALE', 'Female'


class AccountType(models.TextChoices):
    MAHAD            = 'MAHAD',            'Mahad'
    DUGSI            = 'DUGSI',            'Dugsi'
    YOUTH_EVENTS     = 'YOUTH_EVENTS',     'Youth events'
    GENERAL_DONATION = 'GENERAL_DONATION', 'General donation'


class Tab(models.TextChoices):
    OVERVIEW         = 'overview',         'Overview'
    ALL              = 'all',              'All'
    ACTIVE           = 'active',           'Active'
    CHURNED          = 'churned',          'Churned'
    PENDING          = 'pending',          'Pending'
    NEEDS_ATTENTION  = 'needs-attention',  'Needs attention'
    BILLING_MISMATCH = 'billing-mismatch', 'Billing mismatch'
    PAUSED           = 'paused',           'Paused'
    INACTIVE         = 'inactive',         'Inactive'


class DateFilter(models.TextChoices):
    ALL       = 'all',       'All Time'
    TODAY     = 'today',     'Today'
    YESTERDAY = 'yesterday', 'Yesterday'
    THIS_WEEK = 'thisWeek',  'This Week'
    LAST_WEEK = 'lastWeek',  'Last Week'


class ShiftFilter(models.TextChoices):
    ALL       = 'all',       'All Shifts'
    MORNING   = 'MORNING',   'Morning'
    AFTERNOON = 'AFTERNOON', 'Afternoon'


class FamilyStatus(models.TextChoices):
    ACTIVE     = 'active',     'Active'
    PAUSED     = 'paused',     'Paused'
    CHURNED    = 'churned',    'Churned'
    INACTIVE   = 'inactive',   'Inactive'
    NO_PAYMENT = 'no-payment', 'No payment'


class BillingState(models.TextChoices):
    MATCH           = 'match',           'Match'
    OVERPAYING      = 'overpaying',      'Overpaying'
    UNDERPAYING     = 'underpaying',     'Underpaying'
    NO_SUBSCRIPTION = 'no-subscription', 'No subscription'


class SearchType(models.TextChoices):
    EMAIL = 'email', 'Email'
    PHONE = 'phone', 'Phone'
    NAME  = 'name',  'Name'


class SortOrder(models.TextChoices):
    NEWEST   = 'newest',   'Newest first'
    OLDEST   = 'oldest',   'Oldest first'
    NAME     = 'name',     'Family name'
    CHILDREN = 'children', 'Most children'


class ViewMode(models.TextChoices):
    GRID  = 'grid',  'Grid'
    TABLE = 'table', 'Table'


# ── Registration ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Registration:
    """
    One child's enrollment record, flattened for the admin dashboard.

    Only ``id``, ``name`` and ``created_at`` are required; every other field
    is optional and has a defined fallback wherever the pipeline reads it.
    """

    id: str
    name: str
    created_at: datetime

    # Demographics
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    education_level: Optional[str] = None
    grade_level: Optional[str] = None
    school_name: Optional[str] = None
    health_info: Optional[str] = None
    shift: Optional[str] = None
    status: str = EnrollmentStatus.ENROLLED

    # Parent 1 (conceptually always present)
    parent_first_name: Optional[str] = None
    parent_last_name: Optional[str] = None
    parent_email: Optional[str] = None
    parent_phone: Optional[str] = None

    # Parent 2 (optional second guardian)
    parent2_first_name: Optional[str] = None
    parent2_last_name: Optional[str] = None
    parent2_email: Optional[str] = None
    parent2_phone: Optional[str] = None

    # 1 = parent 1 pays, 2 = parent 2 pays, None = not set
    primary_payer_parent_number: Optional[int] = None

    # Billing
    payment_method_captured: bool = False
    payment_method_captured_at: Optional[datetime] = None
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    payment_intent_id: Optional[str] = None
    subscription_status: Optional[str] = None
    subscription_amount: Optional[int] = None   # cents
    paid_until: Optional[datetime] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None

    # Family tracking
    family_reference_id: Optional[str] = None
    account_type: Optional[str] = None
    family_child_count: Optional[int] = None

    # Teacher assignment
    teacher_name: Optional[str] = None
    morning_teacher: Optional[str] = None
    afternoon_teacher: Optional[str] = None

    @property
    def has_teacher_assigned(self):
        return bool(self.teacher_name or self.morning_teacher or self.afternoon_teacher)

    @property
    def parent_name(self):
        return f"{self.parent_first_name or ''} {self.parent_last_name or ''}".strip()

    @property
    def parent2_name(self):
        return f"{self.parent2_first_name or ''} {self.parent2_last_name or ''}".strip()


# ── Derived views ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Family:
    """
    Registrations sharing one grouping key.

    ``members`` is ordered oldest registration first.  ``parent_email`` and
    ``parent_phone`` are copied from that first member.
    """

    family_key: str
    members: tuple = ()
    has_payment: bool = False
    has_subscription: bool = False
    has_churned: bool = False
    parent_email: Optional[str] = None
    parent_phone: Optional[str] = None

    @property
    def display_name(self):
        """Parent 1's last name of the first member, falling back to the child."""
        if not self.members:
            return self.family_key
        first = self.members[0]
        return first.parent_last_name or first.parent_name or first.name


@dataclass(frozen=True)
class BillingStatus:
    status: str
    actual: Optional[int]
    expected: int
    difference: Optional[int]


@dataclass(frozen=True)
class PrimaryPayerPhone:
    phone: Optional[str]
    used_fallback: bool
    fallback_reason: Optional[str] = None


@dataclass(frozen=True)
class ParentContact:
    parent_number: int
    name: str
    email: Optional[str]
    phone: Optional[str]
    is_primary_payer: bool


# ── Filter specification ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class AdvancedFilters:
    """
    Structured filters from the "Advanced Filters" panel.

    Each field left at its default imposes no constraint.  ``date_range`` is
    an explicit (start, end) pair picked on a calendar and is inclusive of
    both ends; ``date_filter`` is a named period and is half-open.
    """

    date_filter: str = DateFilter.ALL
    date_range: Optional[tuple] = None
    has_health_info: bool = False
    schools: frozenset = frozenset()
    grades: frozenset = frozenset()
    shift: str = ShiftFilter.ALL

    @property
    def is_active(self):
        return (
            self.date_filter != DateFilter.ALL
            or self.date_range is not None
            or self.has_health_info
            or bool(self.schools)
            or bool(self.grades)
            or self.shift != ShiftFilter.ALL
        )


@dataclass(frozen=True)
class FilterSpec:
    tab: str = Tab.ALL
    search_query: str = ''
    advanced: AdvancedFilters = field(default_factory=AdvancedFilters)
    quick_shift: Optional[str] = None
