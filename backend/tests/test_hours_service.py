from discovery.services.hours_service import matches_hours, summarize_operating_hours
from discovery.services.taxonomy import HoursFilter


def _week(value):
    return {day: value for day in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")}


def test_summarize_regular_schedule():
    summary = summarize_operating_hours(_week("09:00-21:00"))
    assert not summary.is_24_hours
    assert summary.latest_close_minute == 21 * 60


def test_summarize_closing_after_midnight_reports_next_day_minute():
    hours = _week("12:00-23:00")
    hours["friday"] = "18:00-02:00"
    summary = summarize_operating_hours(hours)
    assert summary.latest_close_minute == 24 * 60 + 2 * 60


def test_summarize_full_day_windows_count_as_round_the_clock():
    assert summarize_operating_hours(_week("00:00-23:59")).is_24_hours
    assert summarize_operating_hours(_week("24/7")).is_24_hours
    assert summarize_operating_hours(_week("Круглосуточно")).is_24_hours


def test_summarize_short_keys_and_list_windows():
    hours = {key: [["10:00", "14:00"], ["16:00", "22:30"]] for key in ("mon", "tue", "wed", "thu", "fri")}
    hours["sat"] = "closed"
    summary = summarize_operating_hours(hours)
    assert not summary.is_24_hours
    assert summary.latest_close_minute == 22 * 60 + 30


def test_summarize_missing_schedule():
    summary = summarize_operating_hours(None)
    assert not summary.is_24_hours
    assert summary.latest_close_minute is None


def test_matches_hours_options():
    assert matches_hours(HoursFilter.OPEN_24_HOURS, True, 1440)
    assert not matches_hours(HoursFilter.OPEN_24_HOURS, False, 1560)

    assert matches_hours(HoursFilter.OPEN_OVERNIGHT, False, 1560)
    assert matches_hours(HoursFilter.OPEN_OVERNIGHT, True, 1440)
    assert not matches_hours(HoursFilter.OPEN_OVERNIGHT, False, 1380)

    assert matches_hours(HoursFilter.CLOSES_BY_22, False, 1320)
    assert not matches_hours(HoursFilter.CLOSES_BY_22, False, 1380)
    assert not matches_hours(HoursFilter.CLOSES_BY_22, True, 1440)
    assert not matches_hours(HoursFilter.CLOSES_BY_22, False, None)


def test_summarize_unparseable_schedule_is_marked_malformed():
    summary = summarize_operating_hours({"monday": "9-18"})
    assert summary.malformed
    assert not summary.is_24_hours
    assert summary.latest_close_minute is None

    assert summarize_operating_hours({"monday": "25:00-26:00"}).malformed
    assert not summarize_operating_hours(_week("09:00-21:00")).malformed
