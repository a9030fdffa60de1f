"""
dugsi/stats.py
──────────────
Headline numbers for the Dugsi dashboard stat cards.
"""

from .family import ensure_sequence
from .status import billing_status
from .types import BillingState, Family, SubscriptionStatus


def monthly_revenue(families):
    """
    Sum of one active member's subscription amount per paying family.
    A family shares a single subscription, so only one member is counted.
    """
    total = 0
    for family in families:
        if not family.has_subscription:
            continue
        paying = next(
            (m for m in family.members
             if m.subscription_status == SubscriptionStatus.ACTIVE and m.subscription_amount),
            None,
        )
        total += paying.subscription_amount if paying else 0
    return total


def revenue_variance(families):
    """
    Expected vs. actual revenue over subscribed families, judged on each
    family's first member.  Returns a dict with expected, actual, variance
    and mismatch_count.
    """
    expected = actual = mismatch_count = 0
    for family in families:
        if not family.has_subscription or not family.members:
            continue
        billing = billing_status(family.members[0])
        expected += billing.expected
        actual   += billing.actual or 0
        if billing.status not in (BillingState.MATCH, BillingState.NO_SUBSCRIPTION):
            mismatch_count += 1

    return {
        'expected':       expected,
        'actual':         actual,
        'variance':       actual - expected,
        'mismatch_count': mismatch_count,
    }


def dashboard_stats(families):
    """
    All dashboard figures in one dict, ready for template context.
    ``paying_rate`` is a whole-number percentage of families.
    """
    families = ensure_sequence(families, Family, 'families')

    total_families   = len(families)
    total_students   = sum(len(f.members) for f in families)
    paying           = sum(1 for f in families if f.has_subscription)
    churned          = sum(1 for f in families if f.has_churned and not f.has_subscription)
    no_payment       = sum(1 for f in families if not f.has_payment and not f.has_churned)
    # half-up: 1 of 8 families is 13%
    paying_rate      = int(paying * 100 / total_families + 0.5) if total_families else 0

    return {
        'total_families':      total_families,
        'total_students':      total_students,
        'paying_families':     paying,
        'churned_families':    churned,
        'no_payment_families': no_payment,
        'paying_rate':         paying_rate,
        'monthly_revenue':     monthly_revenue(families),
        **revenue_variance(families),
    }
