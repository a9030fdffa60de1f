from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from django.test import SimpleTestCase, override_settings

from dugsi.dates import days_since_sunday, get_date_range, in_picked_range, in_range
from dugsi.types import DateFilter

CHICAGO = ZoneInfo('America/Chicago')


def local(*args):
    return datetime(*args, tzinfo=CHICAGO)


@override_settings(TIME_ZONE='America/Chicago', USE_TZ=True)
class GetDateRangeTests(SimpleTestCase):
    # Wednesday afternoon; the week started on Sunday 2024-03-10.
    now = local(2024, 3, 13, 15, 30)

    def test_all_has_no_range(self):
        self.assertIsNone(get_date_range(DateFilter.ALL, now=self.now))

    def test_unknown_filter_has_no_range(self):
        self.assertIsNone(get_date_range('lastMonth', now=self.now))

    def test_today(self):
        self.assertEqual(
            get_date_range(DateFilter.TODAY, now=self.now),
            (local(2024, 3, 13), local(2024, 3, 14)),
        )

    def test_yesterday(self):
        self.assertEqual(
            get_date_range(DateFilter.YESTERDAY, now=self.now),
            (local(2024, 3, 12), local(2024, 3, 13)),
        )

    def test_this_week_runs_from_sunday_to_a_day_from_now(self):
        self.assertEqual(
            get_date_range(DateFilter.THIS_WEEK, now=self.now),
            (local(2024, 3, 10), self.now + timedelta(days=1)),
        )

    def test_last_week(self):
        self.assertEqual(
            get_date_range(DateFilter.LAST_WEEK, now=self.now),
            (local(2024, 3, 3), local(2024, 3, 10)),
        )

    def test_on_a_sunday_the_week_starts_today(self):
        sunday = local(2024, 3, 17, 9, 0)
        start, _ = get_date_range(DateFilter.THIS_WEEK, now=sunday)
        self.assertEqual(start, local(2024, 3, 17))
        self.assertEqual(
            get_date_range(DateFilter.LAST_WEEK, now=sunday),
            (local(2024, 3, 10), local(2024, 3, 17)),
        )

    def test_utc_input_uses_local_day(self):
        # 03:00 UTC on the 14th is still the evening of the 13th in Chicago.
        utc_now = datetime(2024, 3, 14, 3, 0, tzinfo=ZoneInfo('UTC'))
        self.assertEqual(
            get_date_range(DateFilter.TODAY, now=utc_now),
            (local(2024, 3, 13), local(2024, 3, 14)),
        )

    def test_defaults_to_current_time(self):
        start, end = get_date_range(DateFilter.TODAY)
        self.assertEqual(end - start, timedelta(days=1))


class DayOfWeekTests(SimpleTestCase):

    def test_sunday_is_zero(self):
        self.assertEqual(days_since_sunday(date(2024, 3, 10)), 0)
        self.assertEqual(days_since_sunday(date(2024, 3, 13)), 3)
        self.assertEqual(days_since_sunday(date(2024, 3, 16)), 6)


class RangeMembershipTests(SimpleTestCase):

    def test_half_open(self):
        period = (local(2024, 3, 13), local(2024, 3, 14))
        self.assertTrue(in_range(local(2024, 3, 13), period))
        self.assertTrue(in_range(local(2024, 3, 13, 23, 59), period))
        self.assertFalse(in_range(local(2024, 3, 14), period))
        self.assertTrue(in_range(local(2024, 3, 14), None))

    def test_picked_dates_are_inclusive(self):
        picked = (date(2024, 3, 1), date(2024, 3, 5))
        self.assertTrue(in_picked_range(local(2024, 3, 1), picked))
        self.assertTrue(in_picked_range(local(2024, 3, 5, 23, 59), picked))
        self.assertFalse(in_picked_range(local(2024, 3, 6), picked))
        self.assertFalse(in_picked_range(local(2024, 2, 29, 23, 59), picked))

    def test_picked_range_open_ends(self):
        self.assertTrue(in_picked_range(local(2030, 1, 1), (date(2024, 3, 1), None)))
        self.assertFalse(in_picked_range(local(2024, 2, 1), (date(2024, 3, 1), None)))
        self.assertTrue(in_picked_range(local(2000, 1, 1), (None, date(2024, 3, 1))))


@override_settings(TIME_ZONE='America/Chicago', USE_TZ=True)
class MixedAwarenessTests(SimpleTestCase):

    def test_naive_moment_in_aware_range_is_local_time(self):
        period = (local(2024, 3, 13), local(2024, 3, 14))
        self.assertTrue(in_range(datetime(2024, 3, 13, 9, 0), period))
        self.assertFalse(in_range(datetime(2024, 3, 14, 0, 30), period))

    def test_aware_moment_in_naive_range(self):
        period = (datetime(2024, 3, 13), datetime(2024, 3, 14))
        # 04:00 UTC is 23:00 the previous evening in Chicago
        self.assertFalse(in_range(datetime(2024, 3, 13, 4, 0, tzinfo=ZoneInfo('UTC')), period))
        self.assertTrue(in_range(datetime(2024, 3, 13, 6, 0, tzinfo=ZoneInfo('UTC')), period))

    def test_naive_moment_with_aware_picked_bounds(self):
        picked = (local(2024, 3, 1), local(2024, 3, 5, 23, 59))
        self.assertTrue(in_picked_range(datetime(2024, 3, 3, 12, 0), picked))
        self.assertFalse(in_picked_range(datetime(2024, 3, 6, 0, 1), picked))

    def test_naive_moment_with_picked_dates(self):
        picked = (date(2024, 3, 1), date(2024, 3, 5))
        self.assertTrue(in_picked_range(datetime(2024, 3, 5, 22, 0), picked))
        self.assertFalse(in_picked_range(datetime(2024, 3, 6, 0, 0), picked))
