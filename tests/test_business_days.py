from datetime import date, timedelta

import pytest

from cashflow_forecast.business_days import (
    KNOWN_BANK_HOLIDAYS,
    HolidayCalendar,
    add_months,
    clamp_day_of_month,
    get_nth_business_day_after,
    is_business_day,
    parse_posting_date,
    us_bank_holidays,
)


def test_weekends_and_listed_holidays_are_not_business_days():
    assert not is_business_day(date(2026, 10, 17))  # Saturday
    assert not is_business_day(date(2026, 10, 18))  # Sunday
    assert not is_business_day(date(2025, 12, 25))
    assert is_business_day(date(2025, 12, 26))


def test_rules_reproduce_curated_table():
    for year in (2025, 2026, 2027):
        curated = {d for d in KNOWN_BANK_HOLIDAYS if d.year == year}
        assert us_bank_holidays(year) == curated


def test_rules_cover_years_past_the_curated_table():
    holidays = us_bank_holidays(2028)
    assert date(2028, 11, 23) in holidays  # Thanksgiving, 4th Thursday
    assert date(2028, 12, 25) in holidays
    assert date(2028, 7, 4) in holidays
    assert not is_business_day(date(2028, 11, 23))


def test_observed_new_year_never_leaves_its_year():
    # Jan 1 2028 is a Saturday: no observance on Dec 31 2027 from the 2028 rules.
    assert date(2027, 12, 31) not in us_bank_holidays(2028)
    assert date(2027, 12, 31) not in us_bank_holidays(2027)


def test_calendar_extra_dates_and_rules_switch():
    closure = date(2026, 3, 10)
    cal = HolidayCalendar(extra=[closure])
    assert cal.is_holiday(closure)
    assert not is_business_day(closure, cal)

    table_only = HolidayCalendar(use_rules=False)
    assert not table_only.is_holiday(date(2028, 12, 25))
    assert table_only.is_holiday(date(2026, 12, 25))


def test_nth_business_day_skips_weekend_and_holiday():
    # Nov 15 2025 is a Saturday.
    assert get_nth_business_day_after(date(2025, 11, 15), 4) == date(2025, 11, 20)
    # Thanksgiving (Nov 27) is skipped.
    assert get_nth_business_day_after(date(2025, 11, 25), 4) == date(2025, 12, 2)
    # New Year's Day skipped when walking out of December.
    assert get_nth_business_day_after(date(2025, 12, 31), 4) == date(2026, 1, 7)


def test_nth_business_day_zero_and_negative():
    start = date(2026, 10, 17)
    assert get_nth_business_day_after(start, 0) == start
    with pytest.raises(ValueError):
        get_nth_business_day_after(start, -1)


def test_four_business_days_property_over_three_years():
    start = date(2025, 1, 1)
    while start < date(2028, 1, 1):
        result = get_nth_business_day_after(start, 4)
        assert result > start
        assert is_business_day(result)
        counted = sum(
            1
            for i in range(1, (result - start).days + 1)
            if is_business_day(start + timedelta(days=i))
        )
        assert counted == 4
        start += timedelta(days=1)


def test_clamp_and_add_months():
    assert clamp_day_of_month(2026, 2, 31) == date(2026, 2, 28)
    assert clamp_day_of_month(2028, 2, 31) == date(2028, 2, 29)
    assert clamp_day_of_month(2026, 4, 15) == date(2026, 4, 15)
    assert add_months(2026, 12, 1) == (2027, 1)
    assert add_months(2026, 1, -1) == (2025, 12)
    assert add_months(2026, 10, 2) == (2026, 12)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("10/03/2026", date(2026, 10, 3)),
        ("1/5/26", date(2026, 1, 5)),
        ("2026-10-03", date(2026, 10, 3)),
        ('"10/03/2026"', date(2026, 10, 3)),
        ("2026-10-03T00:00:00", date(2026, 10, 3)),
    ],
)
def test_parse_posting_date_accepts_export_formats(raw, expected):
    assert parse_posting_date(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "TOTAL", "13/40/2026", "2026/10/03", "Oct 3"])
def test_parse_posting_date_rejects_garbage(raw):
    assert parse_posting_date(raw) is None
