"""
dugsi/filters.py
────────────────
Tab, search and advanced filtering over aggregated families.

Every filter is stable: surviving families keep their input order.  The
overall rule is  tab ∧ search ∧ advanced ∧ quick shift.

Functions
─────────
detect_search_type(query)            'email' | 'phone' | 'name' | None
family_matches_search(family, query) any member matches the detected mode
filter_families_by_tab(families, tab)
filter_families(families, spec, now=None)
tab_counts(families)                 per-tab totals over the unfiltered set
filter_options(registrations)        sorted unique schools and grades
sort_families(families, order)       explicit consumer-requested ordering
"""

import logging
import re

from .dates import get_date_range, in_picked_range, in_range
from .family import ensure_sequence
from .status import has_billing_mismatch, is_fully_withdrawn, is_paused
from .types import (
    AdvancedFilters,
    DateFilter,
    Family,
    FilterSpec,
    Registration,
    SearchType,
    ShiftFilter,
    SortOrder,
    Tab,
)

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r'\D')

# Queries with at least this many digits are phone searches.
PHONE_SEARCH_MIN_DIGITS = 4


# ── Tabs ──────────────────────────────────────────────────────────────────────

def _is_churned(family):
    return family.has_churned and not family.has_subscription


def _needs_attention(family):
    return not family.has_payment and not family.has_churned


def _has_mismatch(family):
    return family.has_subscription and any(has_billing_mismatch(m) for m in family.members)


def _is_inactive(family):
    return is_fully_withdrawn(family) and not family.has_churned


TAB_PREDICATES = {
    Tab.OVERVIEW:         lambda family: True,
    Tab.ALL:              lambda family: True,
    Tab.ACTIVE:           lambda family: family.has_subscription,
    Tab.CHURNED:          _is_churned,
    Tab.PENDING:          _is_churned,
    Tab.NEEDS_ATTENTION:  _needs_attention,
    Tab.BILLING_MISMATCH: _has_mismatch,
    Tab.PAUSED:           is_paused,
    Tab.INACTIVE:         _is_inactive,
}


def tab_predicate(tab):
    """Predicate for *tab*; unknown tabs match nothing."""
    predicate = TAB_PREDICATES.get(tab)
    if predicate is None:
        logger.debug('Unknown tab %r, matching no families', tab)
        return lambda family: False
    return predicate


def filter_families_by_tab(families, tab):
    families = ensure_sequence(families, Family, 'families')
    predicate = tab_predicate(tab)
    return [f for f in families if predicate(f)]


def tab_counts(families):
    """
    Family count for every tab, always over the full *families* sequence,
    so badges do not move while the visible list is being filtered.
    """
    families = ensure_sequence(families, Family, 'families')
    return {
        tab.value: sum(1 for f in families if predicate(f))
        for tab, predicate in TAB_PREDICATES.items()
    }


# ── Search ────────────────────────────────────────────────────────────────────

def digits_only(value):
    return _NON_DIGITS.sub('', value or '')


def detect_search_type(query):
    """
    Pick the search mode for *query*: an '@' means email, 4+ digits means
    phone, anything else is a name search.  Blank queries give None.
    """
    needle = (query or '').strip().lower()
    if not needle:
        return None
    if '@' in needle:
        return SearchType.EMAIL
    if len(digits_only(query)) >= PHONE_SEARCH_MIN_DIGITS:
        return SearchType.PHONE
    return SearchType.NAME


def _contains(haystack, needle):
    return needle in (haystack or '').lower()


def _search_predicate(query):
    """Member predicate for *query*, or None when the query is blank."""
    search_type = detect_search_type(query)
    if search_type is None:
        return None

    needle = query.strip().lower()

    if search_type == SearchType.EMAIL:
        return lambda m: _contains(m.parent_email, needle) or _contains(m.parent2_email, needle)

    if search_type == SearchType.PHONE:
        last_four = digits_only(query)[-PHONE_SEARCH_MIN_DIGITS:]
        return lambda m: (
            digits_only(m.parent_phone).endswith(last_four)
            or digits_only(m.parent2_phone).endswith(last_four)
        )

    def matches_name(m):
        parent1 = f"{m.parent_first_name or ''} {m.parent_last_name or ''}"
        parent2 = f"{m.parent2_first_name or ''} {m.parent2_last_name or ''}"
        return _contains(m.name, needle) or _contains(parent1, needle) or _contains(parent2, needle)

    return matches_name


def member_matches_search(member, query):
    predicate = _search_predicate(query)
    return predicate is None or predicate(member)


def family_matches_search(family, query):
    predicate = _search_predicate(query)
    return predicate is None or any(predicate(m) for m in family.members)


# ── Advanced filters ──────────────────────────────────────────────────────────

def has_health_info(member):
    """Health info is present unless it is empty or literally 'none'."""
    return member.health_info is not None and member.health_info.strip().lower() not in ('', 'none')


def _shift_predicate(shift):
    if not shift or shift == ShiftFilter.ALL:
        return None
    if shift not in ShiftFilter.values:
        logger.debug('Unknown shift %r, matching no families', shift)
        return lambda family: False
    return lambda family: any(m.shift == shift for m in family.members)


def _advanced_predicate(advanced, now=None):
    """Family predicate for *advanced*, or None when nothing is enabled."""
    checks = []

    if advanced.date_filter != DateFilter.ALL:
        period = get_date_range(advanced.date_filter, now=now)
        if period is not None:
            checks.append(lambda f: any(in_range(m.created_at, period) for m in f.members))
        else:
            logger.debug('Unknown date filter %r, ignoring', advanced.date_filter)

    if advanced.date_range is not None:
        picked = advanced.date_range
        checks.append(lambda f: any(in_picked_range(m.created_at, picked) for m in f.members))

    if advanced.has_health_info:
        checks.append(lambda f: any(has_health_info(m) for m in f.members))

    if advanced.schools:
        schools = advanced.schools
        checks.append(lambda f: any(m.school_name in schools for m in f.members))

    if advanced.grades:
        grades = advanced.grades
        checks.append(lambda f: any(m.grade_level in grades for m in f.members))

    shift_check = _shift_predicate(advanced.shift)
    if shift_check is not None:
        checks.append(shift_check)

    if not checks:
        return None
    return lambda family: all(check(family) for check in checks)


def family_matches_advanced(family, advanced, now=None):
    predicate = _advanced_predicate(advanced, now=now)
    return predicate is None or predicate(family)


# ── Combined ──────────────────────────────────────────────────────────────────

def filter_families(families, spec=None, now=None):
    """
    Apply *spec* (a FilterSpec) to *families*, keeping input order.
    ``now`` pins the clock used for named date periods.
    """
    families = ensure_sequence(families, Family, 'families')
    spec = spec or FilterSpec()

    predicates = [tab_predicate(spec.tab)]

    search = _search_predicate(spec.search_query)
    if search is not None:
        predicates.append(lambda f: any(search(m) for m in f.members))

    advanced = _advanced_predicate(spec.advanced or AdvancedFilters(), now=now)
    if advanced is not None:
        predicates.append(advanced)

    quick_shift = _shift_predicate(spec.quick_shift)
    if quick_shift is not None:
        predicates.append(quick_shift)

    result = [f for f in families if all(p(f) for p in predicates)]
    logger.debug('Filtered %d families down to %d (tab=%s)', len(families), len(result), spec.tab)
    return result


# ── Options and ordering ──────────────────────────────────────────────────────

def filter_options(registrations):
    """Unique school names and grade levels for the advanced filter pickers."""
    registrations = ensure_sequence(registrations, Registration, 'registrations')
    return {
        'schools': sorted({r.school_name for r in registrations if r.school_name}),
        'grades':  sorted({r.grade_level for r in registrations if r.grade_level}),
    }


def _first_created(family):
    return family.members[0].created_at if family.members else None


def sort_families(families, order):
    """
    Return *families* re-ordered by *order* (a SortOrder).  Python's sort is
    stable, so ties keep their input order.  Unknown orders leave the
    sequence as it is.
    """
    families = ensure_sequence(families, Family, 'families')
    with_members = [f for f in families if f.members]
    empty = [f for f in families if not f.members]

    if order == SortOrder.NEWEST:
        return sorted(with_members, key=_first_created, reverse=True) + empty
    if order == SortOrder.OLDEST:
        return sorted(with_members, key=_first_created) + empty
    if order == SortOrder.NAME:
        return sorted(families, key=lambda f: f.display_name.lower())
    if order == SortOrder.CHILDREN:
        return sorted(families, key=lambda f: len(f.members), reverse=True)
    return families
