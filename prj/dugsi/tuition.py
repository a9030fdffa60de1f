"""
dugsi/tuition.py
────────────────
Tiered monthly tuition for Dugsi families.

Rate formula (by number of enrolled children, default tiers):
    1st and 2nd child   $80 each
    3rd child           $70
    4th child onward    $60 each

    1 child  → $80      3 children → $230      5 children → $350
    2 children → $160   4 children → $290

All amounts are integer cents.  Tier values come from
settings.DUGSI_TUITION_RATES and are read on every call.
"""

import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)

_RATE_KEYS = ('BASE_RATE', 'THIRD_CHILD', 'FOURTH_PLUS')


def get_rates():
    """
    Return the configured tier amounts as a dict keyed by BASE_RATE,
    THIRD_CHILD and FOURTH_PLUS.
    """
    configured = getattr(settings, 'DUGSI_TUITION_RATES', None) or {}
    rates = {}
    for key in _RATE_KEYS:
        value = configured.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            logger.error('DUGSI_TUITION_RATES[%r] is invalid: %r', key, value)
            raise ImproperlyConfigured(
                f'DUGSI_TUITION_RATES[{key!r}] must be a positive integer number of cents.'
            )
        rates[key] = value
    return rates


def _is_count(child_count):
    return isinstance(child_count, int) and not isinstance(child_count, bool) and child_count > 0


def calculate_rate(child_count):
    """
    Monthly tuition in cents for *child_count* children.
    Returns 0 for zero, negative or non-integer counts.
    """
    if not _is_count(child_count):
        return 0
    return rate_breakdown(child_count)['total']


def rate_breakdown(child_count):
    """
    Split the family rate into its tiers, e.g. for 4 children:
    {'first_two': 16000, 'third': 7000, 'fourth_plus': 6000, 'total': 29000}
    """
    if not _is_count(child_count):
        return {'first_two': 0, 'third': 0, 'fourth_plus': 0, 'total': 0}

    rates = get_rates()
    first_two   = rates['BASE_RATE'] * min(child_count, 2)
    third       = rates['THIRD_CHILD'] if child_count >= 3 else 0
    fourth_plus = rates['FOURTH_PLUS'] * max(child_count - 3, 0)

    return {
        'first_two':   first_two,
        'third':       third,
        'fourth_plus': fourth_plus,
        'total':       first_two + third + fourth_plus,
    }


def validate_override_amount(override_amount, child_count):
    """
    Check an admin-entered rate override.

    Returns (valid, reason).  Non-positive or fractional amounts are invalid.
    Amounts above the family ceiling, or more than 50% away from the
    calculated rate, are valid but come with a warning reason.
    """
    if isinstance(override_amount, bool) or not isinstance(override_amount, (int, float)):
        return False, 'Override amount must be a number'
    if override_amount <= 0:
        return False, 'Override amount must be positive'
    if override_amount != int(override_amount):
        return False, 'Override amount must be a whole number'

    ceiling = settings.DUGSI_MAX_EXPECTED_FAMILY_RATE
    if override_amount > ceiling:
        return True, f'Override exceeds typical maximum rate of {format_rate(ceiling)}'

    calculated = calculate_rate(child_count)
    if calculated > 0 and abs(override_amount - calculated) / calculated > 0.5:
        return True, f'Override differs significantly from calculated rate ({format_rate(calculated)})'

    return True, None


# ── Display helpers ───────────────────────────────────────────────────────────

_CURRENCY_SYMBOLS = {'USD': '$', 'CAD': '$', 'EUR': '€', 'GBP': '£'}


def format_rate(rate_in_cents):
    """8000 → '$80.00'"""
    currency = getattr(settings, 'DUGSI_CURRENCY', 'USD')
    symbol = _CURRENCY_SYMBOLS.get(currency, f'{currency} ')
    sign = '-' if rate_in_cents < 0 else ''
    return f'{sign}{symbol}{abs(rate_in_cents) / 100:,.2f}'


def format_rate_display(rate_in_cents):
    return f'{format_rate(rate_in_cents)}/month'


def rate_tier_description(child_count):
    """Human-readable tier summary for the payment-link dialog."""
    if not _is_count(child_count):
        return 'No children enrolled'

    rates = get_rates()
    base   = format_rate(rates['BASE_RATE']).replace('.00', '')
    third  = format_rate(rates['THIRD_CHILD']).replace('.00', '')
    fourth = format_rate(rates['FOURTH_PLUS']).replace('.00', '')

    if child_count == 1:
        return f'1 child at {base}/month'
    if child_count == 2:
        return f'2 children at {base}/month each'
    if child_count == 3:
        return f'3 children (2 at {base}, 1 at {third})'
    return f'{child_count} children (2 at {base}, 1 at {third}, {child_count - 3} at {fourth})'
