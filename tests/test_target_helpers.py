import datetime
import sys
import unittest
import unittest.mock
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

import target_helpers
from board_helpers import NUM_SQUARES, PUZZLE_HEIGHT, PUZZLE_WIDTH, BoardMask, iter_coordinates
from target_helpers import (
    BOARD_LABELS,
    LabelKind,
    Month,
    TargetDate,
    Weekday,
    iter_target_dates,
    label_at,
    parse_iso_date,
    parse_month,
    parse_target,
    parse_weekday,
)


class BoardLabelTests(unittest.TestCase):
    def test_layout_shape(self) -> None:
        self.assertEqual(len(BOARD_LABELS), PUZZLE_HEIGHT)
        self.assertTrue(all(len(row) == PUZZLE_WIDTH for row in BOARD_LABELS))

    def test_every_date_label_appears_once(self) -> None:
        labels = [label_at(x, y) for x, y in iter_coordinates()]
        labelled = [label for label in labels if label.kind is not LabelKind.UNLABELED]
        self.assertEqual(len(labelled), len(set(labelled)))
        self.assertEqual(len(labelled), 12 + 31 + 7)
        self.assertEqual(len(labels) - len(labelled), 4)

    def test_label_positions(self) -> None:
        self.assertEqual(label_at(0, 0).text, "Jan")
        self.assertEqual(label_at(5, 1).text, "Dec")
        self.assertEqual(label_at(0, 2).text, "1")
        self.assertEqual(label_at(0, 7).text, "31")
        self.assertEqual(label_at(3, 7).text, "Mon")
        self.assertEqual(label_at(5, 8).text, "Sun")
        self.assertEqual(label_at(1, 7).text, "")


class WinningMaskTests(unittest.TestCase):
    def test_january_first_monday(self) -> None:
        mask = TargetDate(Month.JANUARY, 1, Weekday.MONDAY).winning_mask()
        self.assertIsNotNone(mask)
        self.assertEqual(mask.count(), NUM_SQUARES - 3)
        self.assertEqual(mask.inverted(), BoardMask.from_cells([(0, 0), (0, 2), (3, 7)]))

    def test_december_thirty_first_sunday(self) -> None:
        mask = TargetDate(Month.DECEMBER, 31, Weekday.SUNDAY).winning_mask()
        self.assertEqual(mask.inverted(), BoardMask.from_cells([(5, 1), (0, 7), (5, 8)]))

    def test_leap_day_is_allowed(self) -> None:
        self.assertIsNotNone(TargetDate(Month.FEBRUARY, 29, Weekday.SATURDAY).winning_mask())

    def test_impossible_days_have_no_mask(self) -> None:
        self.assertIsNone(TargetDate(Month.FEBRUARY, 30, Weekday.MONDAY).winning_mask())
        self.assertIsNone(TargetDate(Month.APRIL, 31, Weekday.MONDAY).winning_mask())
        self.assertIsNone(TargetDate(Month.JANUARY, 0, Weekday.MONDAY).winning_mask())
        self.assertIsNone(TargetDate(Month.JANUARY, 32, Weekday.MONDAY).winning_mask())

    def test_duplicate_label_raises(self) -> None:
        broken = (BOARD_LABELS[0],) + BOARD_LABELS[:-1]
        with unittest.mock.patch.object(target_helpers, "BOARD_LABELS", broken):
            with self.assertRaises(RuntimeError):
                TargetDate(Month.JANUARY, 1, Weekday.MONDAY).winning_mask()

    def test_missing_label_logs_and_returns_none(self) -> None:
        # blank out the weekday rows
        blank_row = (target_helpers.BoardLabel(LabelKind.UNLABELED),) * PUZZLE_WIDTH
        broken = BOARD_LABELS[:7] + (blank_row, blank_row)
        with unittest.mock.patch.object(target_helpers, "BOARD_LABELS", broken):
            with self.assertLogs("target_helpers", level="WARNING"):
                mask = TargetDate(Month.JULY, 1, Weekday.MONDAY).winning_mask()
        self.assertIsNone(mask)


class CalendarTests(unittest.TestCase):
    def test_month_lengths(self) -> None:
        self.assertEqual(Month.FEBRUARY.number_days(False), 28)
        self.assertEqual(Month.FEBRUARY.number_days(True), 29)
        self.assertEqual(Month.SEPTEMBER.number_days(False), 30)
        self.assertEqual(Month.AUGUST.number_days(False), 31)
        self.assertIsNone(Month.DECEMBER.next())
        self.assertEqual(Weekday.SUNDAY.next(), Weekday.MONDAY)

    def test_next_day(self) -> None:
        start = TargetDate(Month.JANUARY, 31, Weekday.WEDNESDAY)
        self.assertEqual(start.next(False), TargetDate(Month.FEBRUARY, 1, Weekday.THURSDAY))
        feb = TargetDate(Month.FEBRUARY, 28, Weekday.MONDAY)
        self.assertEqual(feb.next(False), TargetDate(Month.MARCH, 1, Weekday.TUESDAY))
        self.assertEqual(feb.next(True), TargetDate(Month.FEBRUARY, 29, Weekday.TUESDAY))
        self.assertIsNone(TargetDate(Month.DECEMBER, 31, Weekday.FRIDAY).next(False))

    def test_year_iteration_matches_datetime(self) -> None:
        for year, leap_year, length in ((2023, False, 365), (2024, True, 366)):
            start = TargetDate.from_date(datetime.date(year, 1, 1))
            dates = list(iter_target_dates(start, leap_year))
            self.assertEqual(len(dates), length)
            day = datetime.date(year, 1, 1)
            for target in dates:
                self.assertEqual(target, TargetDate.from_date(day))
                day += datetime.timedelta(days=1)

    def test_str(self) -> None:
        self.assertEqual(str(TargetDate(Month.JUNE, 17, Weekday.WEDNESDAY)), "Wed Jun 17")


class ParseTests(unittest.TestCase):
    def test_parse_month(self) -> None:
        self.assertEqual(parse_month("jan"), Month.JANUARY)
        self.assertEqual(parse_month("December"), Month.DECEMBER)
        self.assertEqual(parse_month("12"), Month.DECEMBER)
        self.assertEqual(parse_month("may"), Month.MAY)
        with self.assertRaisesRegex(ValueError, "ambiguous"):
            parse_month("ju")
        with self.assertRaisesRegex(ValueError, "unknown"):
            parse_month("smarch")
        with self.assertRaises(ValueError):
            parse_month("13")
        with self.assertRaises(ValueError):
            parse_month(" ")

    def test_parse_weekday(self) -> None:
        self.assertEqual(parse_weekday("1"), Weekday.MONDAY)
        self.assertEqual(parse_weekday("7"), Weekday.SUNDAY)
        self.assertEqual(parse_weekday("th"), Weekday.THURSDAY)
        with self.assertRaisesRegex(ValueError, "ambiguous"):
            parse_weekday("t")
        with self.assertRaises(ValueError):
            parse_weekday("0")

    def test_parse_target(self) -> None:
        self.assertEqual(
            parse_target("jan", "24", "thu"), TargetDate(Month.JANUARY, 24, Weekday.THURSDAY)
        )
        with self.assertRaises(ValueError):
            parse_target("jan", "first", "mon")

    def test_parse_iso_date(self) -> None:
        self.assertEqual(parse_iso_date("2024-02-29"), TargetDate(Month.FEBRUARY, 29, Weekday.THURSDAY))
        with self.assertRaises(ValueError):
            parse_iso_date("2023-02-29")


if __name__ == "__main__":
    unittest.main()
