import unittest
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from yomtovcheck.errors import (
    AmbiguousTimeZoneError,
    EmptyScheduleError,
    ErrorPolicy,
    MalformedCalendarBlockError,
    UnrecognizedTimeZoneError,
)
from yomtovcheck.model import SingletonCourse, WeeklyCourse
from yomtovcheck.parse import parse_courses, parse_dt_property, parse_schedule, unfold_lines

NY = ZoneInfo("America/New_York")


def ics(*lines: str) -> str:
    return "\r\n".join(["BEGIN:VCALENDAR", "VERSION:2.0", *lines, "END:VCALENDAR"]) + "\r\n"


PENN_LABS = ics(
    "PRODID:Penn Labs",
    "BEGIN:VEVENT",
    "SUMMARY:CIS 1200-001",
    "DTSTART:20240117T100000Z",
    "DTEND:20240117T105000Z",
    "RRULE:FREQ=WEEKLY;UNTIL=20240501T235959Z;BYDAY=MO,WE,FR",
    "END:VEVENT",
)

GOOGLE = ics(
    "PRODID:-//Google Inc//Google Calendar 70.9054//EN",
    "BEGIN:VEVENT",
    "DTSTART;TZID=America/New_York:20240118T133000",
    "DTEND;TZID=America/New_York:20240118T145000",
    "RRULE:FREQ=WEEKLY;BYDAY=TU,TH",
    "SUMMARY:MATH 2400-002",
    "END:VEVENT",
    "BEGIN:VEVENT",
    "DTSTART:20240510T140000Z",
    "DTEND:20240510T160000Z",
    "SUMMARY:MATH 2400 Final",
    "END:VEVENT",
)


class TestUnfold(unittest.TestCase):
    def test_continuation_lines_are_merged(self) -> None:
        text = "BEGIN:VEVENT\r\nSUMMARY:Intro to\r\n  Algorithms\r\nEND:VEVENT"
        self.assertEqual(unfold_lines(text), ["BEGIN:VEVENT", "SUMMARY:Intro to Algorithms", "END:VEVENT"])

    def test_mixed_line_breaks(self) -> None:
        self.assertEqual(unfold_lines("A\nB\rC\r\nD"), ["A", "B", "C", "D"])


class TestDateTimeProperty(unittest.TestCase):
    def test_tzid_wins(self) -> None:
        dt = parse_dt_property("DTSTART;TZID=America/Los_Angeles:20240118T100000", NY)
        self.assertEqual(dt, datetime(2024, 1, 18, 13, 0, tzinfo=NY))
        self.assertIs(dt.tzinfo, NY)

    def test_utc_marker(self) -> None:
        dt = parse_dt_property("DTSTART:20240118T150000Z", NY)
        self.assertEqual(dt, datetime(2024, 1, 18, 15, 0, tzinfo=timezone.utc))
        self.assertEqual(dt.hour, 10)

    def test_utc_marker_read_as_local_for_quirky_exporter(self) -> None:
        dt = parse_dt_property("DTSTART:20240118T150000Z", NY, local_as_utc=True)
        self.assertEqual(dt, datetime(2024, 1, 18, 15, 0, tzinfo=NY))

    def test_floating_time_uses_local_zone(self) -> None:
        dt = parse_dt_property("DTEND:20240118T150000", NY)
        self.assertEqual(dt, datetime(2024, 1, 18, 15, 0, tzinfo=NY))

    def test_date_only_start_and_end(self) -> None:
        start = parse_dt_property("DTSTART;VALUE=DATE:20240301", NY)
        end = parse_dt_property("DTEND;VALUE=DATE:20240301", NY)
        self.assertEqual(start, datetime(2024, 3, 1, 0, 0, tzinfo=NY))
        self.assertEqual(end, datetime.combine(date(2024, 3, 1), time.max, tzinfo=NY))

    def test_tzid_and_utc_marker_is_ambiguous(self) -> None:
        with self.assertRaises(AmbiguousTimeZoneError):
            parse_dt_property("DTSTART;TZID=America/New_York:20240118T150000Z", NY)

    def test_two_tzids_are_ambiguous(self) -> None:
        with self.assertRaises(AmbiguousTimeZoneError):
            parse_dt_property("DTSTART;TZID=America/New_York;TZID=Europe/Paris:20240118T150000", NY)

    def test_unknown_zone(self) -> None:
        with self.assertRaises(UnrecognizedTimeZoneError) as ctx:
            parse_dt_property("DTSTART;TZID=Mars/Olympus_Mons:20240118T150000", NY, line_no=7)
        self.assertEqual(ctx.exception.line_no, 7)

    def test_garbage_timestamp(self) -> None:
        with self.assertRaises(MalformedCalendarBlockError):
            parse_dt_property("DTSTART:2024-01-18 15:00", NY)


class TestParseSchedule(unittest.TestCase):
    def test_penn_labs_weekly_course(self) -> None:
        schedule = parse_schedule(PENN_LABS, NY)
        self.assertEqual(len(schedule.courses), 1)
        course = schedule.courses[0]
        self.assertIsInstance(course, WeeklyCourse)
        assert isinstance(course, WeeklyCourse)
        self.assertEqual(course.name, "CIS 1200-001")
        self.assertEqual(course.days, frozenset({1, 3, 5}))
        self.assertEqual(course.start_time, time(10, 0))
        self.assertEqual(course.end_time, time(10, 50))
        self.assertEqual(course.first_date, date(2024, 1, 17))
        self.assertEqual(course.last_date, date(2024, 5, 1))
        self.assertEqual((schedule.first_date, schedule.last_date), (date(2024, 1, 17), date(2024, 5, 1)))

    def test_same_file_without_quirk_is_utc(self) -> None:
        text = PENN_LABS.replace("PRODID:Penn Labs", "PRODID:-//Other//EN")
        course = parse_schedule(text, NY).courses[0]
        assert isinstance(course, WeeklyCourse)
        self.assertEqual(course.start_time, time(5, 0))

    def test_weekly_without_until_ends_with_schedule(self) -> None:
        schedule = parse_schedule(GOOGLE, NY)
        weekly, final = schedule.courses
        assert isinstance(weekly, WeeklyCourse)
        self.assertIsInstance(final, SingletonCourse)
        self.assertEqual(schedule.first_date, date(2024, 1, 18))
        self.assertEqual(schedule.last_date, date(2024, 5, 10))
        self.assertEqual(weekly.last_date, date(2024, 5, 10))
        self.assertEqual(weekly.days, frozenset({2, 4}))

    def test_singleton_is_converted_to_local_zone(self) -> None:
        final = parse_schedule(GOOGLE, NY).courses[1]
        assert isinstance(final, SingletonCourse)
        self.assertEqual(final.interval.start, datetime(2024, 5, 10, 10, 0, tzinfo=NY))
        self.assertIs(final.interval.start.tzinfo, NY)

    def test_summary_escapes_and_params(self) -> None:
        text = ics(
            "BEGIN:VEVENT",
            "SUMMARY;LANGUAGE=en:Math\\, Section 1",
            "DTSTART:20240118T100000",
            "DTEND:20240118T110000",
            "END:VEVENT",
        )
        self.assertEqual(parse_schedule(text, NY).courses[0].name, "Math, Section 1")

    def test_full_weekday_names(self) -> None:
        text = ics(
            "BEGIN:VEVENT",
            "SUMMARY:Seminar",
            "DTSTART:20240115T100000",
            "DTEND:20240115T110000",
            "RRULE:FREQ=WEEKLY;UNTIL=20240301;BYDAY=MONDAY",
            "END:VEVENT",
        )
        course = parse_schedule(text, NY).courses[0]
        assert isinstance(course, WeeklyCourse)
        self.assertEqual(course.days, frozenset({1}))
        self.assertEqual(course.last_date, date(2024, 3, 1))

    def test_parsing_stops_at_end_of_calendar(self) -> None:
        extra = "\r\n".join(
            ["BEGIN:VEVENT", "SUMMARY:Ghost", "DTSTART:20240118T100000", "DTEND:20240118T110000", "END:VEVENT"]
        )
        schedule = parse_schedule(PENN_LABS + extra, NY)
        self.assertEqual([c.name for c in schedule.courses], ["CIS 1200-001"])

    def test_missing_end_is_fatal(self) -> None:
        text = ics("BEGIN:VEVENT", "SUMMARY:No end", "DTSTART:20240118T100000", "END:VEVENT")
        with self.assertRaises(MalformedCalendarBlockError) as ctx:
            parse_schedule(text, NY)
        self.assertEqual(ctx.exception.line_no, 3)
        self.assertIn("end", str(ctx.exception))

    def test_unterminated_event_is_fatal(self) -> None:
        text = "BEGIN:VCALENDAR\r\nBEGIN:VEVENT\r\nSUMMARY:x\r\n"
        with self.assertRaises(MalformedCalendarBlockError):
            parse_schedule(text, NY)

    def test_unsupported_frequency(self) -> None:
        text = ics(
            "BEGIN:VEVENT",
            "SUMMARY:Monthly",
            "DTSTART:20240118T100000",
            "DTEND:20240118T110000",
            "RRULE:FREQ=MONTHLY;BYDAY=1MO",
            "END:VEVENT",
        )
        with self.assertRaises(MalformedCalendarBlockError):
            parse_schedule(text, NY)

    def test_bad_until_reports_rule_line(self) -> None:
        text = ics(
            "BEGIN:VEVENT",
            "SUMMARY:Seminar",
            "DTSTART:20240118T100000",
            "DTEND:20240118T110000",
            "RRULE:FREQ=WEEKLY;UNTIL=2024-05-01;BYDAY=TH",
            "END:VEVENT",
        )
        with self.assertRaises(MalformedCalendarBlockError) as ctx:
            parse_schedule(text, NY)
        self.assertEqual(ctx.exception.line, "RRULE:FREQ=WEEKLY;UNTIL=2024-05-01;BYDAY=TH")
        self.assertEqual(ctx.exception.line_no, 7)
        self.assertIn("RRULE:FREQ=WEEKLY", str(ctx.exception))

    def test_empty_calendar(self) -> None:
        with self.assertRaises(EmptyScheduleError):
            parse_schedule(ics(), NY)

    def test_lenient_policy_skips_broken_event(self) -> None:
        text = ics(
            "BEGIN:VEVENT",
            "SUMMARY:Broken",
            "DTSTART;TZID=Nowhere/Land:20240118T100000",
            "DTEND:20240118T110000",
            "END:VEVENT",
            "BEGIN:VEVENT",
            "SUMMARY:Fine",
            "DTSTART:20240118T100000",
            "DTEND:20240118T110000",
            "END:VEVENT",
        )
        issues: list = []
        courses = parse_courses(text, NY, ErrorPolicy.LENIENT, issues)
        self.assertEqual([c.name for c in courses], ["Fine"])
        self.assertEqual(len(issues), 1)
        self.assertIsInstance(issues[0], UnrecognizedTimeZoneError)

        with self.assertRaises(UnrecognizedTimeZoneError):
            parse_courses(text, NY)


if __name__ == "__main__":
    unittest.main()
