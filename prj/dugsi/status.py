"""
dugsi/status.py
───────────────
Status and billing classification for aggregated families.

family_status(family)
    active > paused > churned > inactive > no-payment (first match wins).

billing_status(member)
    Compares the member's subscription amount to the tiered tuition for
    their family size.
"""

from .tuition import calculate_rate
from .types import (
    ACTIVE_ENROLLMENT_STATUSES,
    BillingState,
    BillingStatus,
    FamilyStatus,
    SubscriptionStatus,
)


# ── Member predicates ─────────────────────────────────────────────────────────

def is_active_member(member):
    """True for ENROLLED or REGISTERED members; anything else is not active."""
    return member.status in ACTIVE_ENROLLMENT_STATUSES


def active_members(family):
    return [m for m in family.members if is_active_member(m)]


def is_paused(family):
    """At least one active member and any member on a paused subscription."""
    return bool(active_members(family)) and any(
        m.subscription_status == SubscriptionStatus.PAUSED for m in family.members
    )


def is_fully_withdrawn(family):
    """No active members left (an empty family counts as withdrawn)."""
    return not active_members(family)


# ── Family status ─────────────────────────────────────────────────────────────

def family_status(family):
    if family.has_subscription:
        return FamilyStatus.ACTIVE
    if is_paused(family):
        return FamilyStatus.PAUSED
    if family.has_churned:
        return FamilyStatus.CHURNED
    if family.members and is_fully_withdrawn(family):
        return FamilyStatus.INACTIVE
    return FamilyStatus.NO_PAYMENT


# ── Billing ───────────────────────────────────────────────────────────────────

def expected_amount(member):
    """Tiered tuition for the member's family size; a count below 1 is treated as 1."""
    child_count = member.family_child_count
    if not isinstance(child_count, int) or isinstance(child_count, bool) or child_count < 1:
        child_count = 1
    return calculate_rate(child_count)


def billing_status(member):
    expected = expected_amount(member)
    actual = member.subscription_amount

    if not actual:
        return BillingStatus(
            status=BillingState.NO_SUBSCRIPTION,
            actual=None,
            expected=expected,
            difference=None,
        )

    difference = actual - expected
    if difference == 0:
        state = BillingState.MATCH
    elif difference > 0:
        state = BillingState.OVERPAYING
    else:
        state = BillingState.UNDERPAYING

    return BillingStatus(status=state, actual=actual, expected=expected, difference=difference)


def has_billing_mismatch(member):
    return billing_status(member).status in (BillingState.OVERPAYING, BillingState.UNDERPAYING)
