"""
dugsi/family.py
───────────────
Family aggregation: turns the flat list of per-child registrations into
Family view models.

Functions
─────────
get_family_key(registration)
    The grouping key: family_reference_id, else parent_email, else the
    registration's own id.  This is the single resolution rule used
    everywhere families are keyed.

group_registrations_by_family(registrations)
    One Family per distinct key, in first-seen key order, members sorted
    oldest registration first.

get_primary_payer_phone(family) / ordered_parents(member)
    Contact helpers for payment links and the family detail sheet.
"""

import logging
from collections.abc import Mapping

from .types import Family, ParentContact, PrimaryPayerPhone, Registration, SubscriptionStatus

logger = logging.getLogger(__name__)


def ensure_sequence(items, item_type, label):
    """
    Materialise *items* into a list, failing fast on structural misuse:
    strings, mappings, non-iterables, or elements of the wrong type.
    """
    if items is None or isinstance(items, (str, bytes, Mapping)):
        raise TypeError(f'{label} must be a sequence of {item_type.__name__} objects, got {type(items).__name__}')
    try:
        materialised = list(items)
    except TypeError:
        raise TypeError(
            f'{label} must be a sequence of {item_type.__name__} objects, got {type(items).__name__}'
        ) from None
    for item in materialised:
        if not isinstance(item, item_type):
            raise TypeError(f'{label} must only contain {item_type.__name__} objects, got {type(item).__name__}')
    return materialised


# ── Grouping key ──────────────────────────────────────────────────────────────

def get_family_key(registration):
    if registration.family_reference_id:
        return registration.family_reference_id
    if registration.parent_email:
        return registration.parent_email
    return registration.id


# ── Aggregation ───────────────────────────────────────────────────────────────

def _has_subscription_in(member, status):
    return bool(member.stripe_subscription_id) and member.subscription_status == status


def build_family(family_key, members):
    """
    Build a Family from already-grouped *members*.  Members are re-sorted by
    creation time (stable, so equal timestamps keep their given order).
    """
    ordered = tuple(sorted(members, key=lambda m: m.created_at))
    first = ordered[0] if ordered else None

    return Family(
        family_key=family_key,
        members=ordered,
        has_payment=any(m.payment_method_captured for m in ordered),
        has_subscription=any(_has_subscription_in(m, SubscriptionStatus.ACTIVE) for m in ordered),
        has_churned=any(_has_subscription_in(m, SubscriptionStatus.CANCELED) for m in ordered),
        parent_email=first.parent_email if first else None,
        parent_phone=first.parent_phone if first else None,
    )


def group_registrations_by_family(registrations):
    """
    Group *registrations* into families.  Empty input gives an empty list.
    Every registration lands in exactly one family.
    """
    registrations = ensure_sequence(registrations, Registration, 'registrations')

    groups: dict[str, list] = {}
    for registration in registrations:
        groups.setdefault(get_family_key(registration), []).append(registration)

    families = [build_family(key, members) for key, members in groups.items()]
    logger.debug('Grouped %d registrations into %d families', len(registrations), len(families))
    return families


def flatten_families(families):
    """All members of *families*, family by family."""
    return [member for family in families for member in family.members]


# ── Contact helpers ───────────────────────────────────────────────────────────

PRIMARY_PAYER_NOT_SET = 'primary_payer_not_set'
PRIMARY_PAYER_PHONE_MISSING = 'primary_payer_phone_missing'


def get_primary_payer_phone(family):
    """
    Phone number to send payment links to.

    Uses the primary payer's phone and falls back to the other parent's.
    ``used_fallback`` is True whenever the primary payer is unset or their
    phone is missing; ``fallback_reason`` says which.
    """
    if not family.members:
        return PrimaryPayerPhone(family.parent_phone, True, PRIMARY_PAYER_NOT_SET)

    first = family.members[0]
    payer = first.primary_payer_parent_number

    if payer == 2:
        preferred, other = first.parent2_phone, first.parent_phone
    else:
        preferred, other = first.parent_phone, first.parent2_phone

    if payer not in (1, 2):
        return PrimaryPayerPhone(preferred or other or None, True, PRIMARY_PAYER_NOT_SET)
    if preferred:
        return PrimaryPayerPhone(preferred, False)
    return PrimaryPayerPhone(other or None, True, PRIMARY_PAYER_PHONE_MISSING)


def ordered_parents(member):
    """
    The parents on *member*'s registration, primary payer first.
    Parent 2 is only listed when any of their fields is filled in.
    """
    parents = [
        ParentContact(
            parent_number=1,
            name=member.parent_name,
            email=member.parent_email,
            phone=member.parent_phone,
            is_primary_payer=member.primary_payer_parent_number == 1,
        ),
    ]
    if any((member.parent2_first_name, member.parent2_last_name, member.parent2_email, member.parent2_phone)):
        parents.append(ParentContact(
            parent_number=2,
            name=member.parent2_name,
            email=member.parent2_email,
            phone=member.parent2_phone,
            is_primary_payer=member.primary_payer_parent_number == 2,
        ))

    if member.primary_payer_parent_number == 2 and len(parents) == 2:
        parents.reverse()
    return parents
