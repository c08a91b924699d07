"""Board label layout and target-date to winning-mask resolution."""

from __future__ import annotations

import datetime
import logging
from enum import Enum
from typing import Iterator, NamedTuple, Optional, Tuple, Type, TypeVar, Union

from board_helpers import BoardMask, iter_coordinates

LOGGER = logging.getLogger(__name__)

# =========================
# Calendar enums
# =========================
class Month(Enum):
    JANUARY = 1
    FEBRUARY = 2
    MARCH = 3
    APRIL = 4
    MAY = 5
    JUNE = 6
    JULY = 7
    AUGUST = 8
    SEPTEMBER = 9
    OCTOBER = 10
    NOVEMBER = 11
    DECEMBER = 12

    def number_days(self, leap_year: bool) -> int:
        if self is Month.FEBRUARY:
            return 29 if leap_year else 28
        if self in (Month.APRIL, Month.JUNE, Month.SEPTEMBER, Month.NOVEMBER):
            return 30
        return 31

    def next(self) -> Optional["Month"]:
        """Return the following month, or None after December."""
        if self is Month.DECEMBER:
            return None
        return Month(self.value + 1)

    def next_day(self, day: int, leap_year: bool) -> Optional[int]:
        if day >= self.number_days(leap_year):
            return None
        return day + 1

    @property
    def short_name(self) -> str:
        return self.name[:3].title()


class Weekday(Enum):
    """Days of the week, numbered like datetime.date.weekday()."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    def next(self) -> "Weekday":
        return Weekday((self.value + 1) % 7)

    @property
    def short_name(self) -> str:
        return self.name[:3].title()


E = TypeVar("E", Month, Weekday)


def _parse_enum(enum_cls: Type[E], text: str) -> E:
    """Parse a member by number, full name, or unique name prefix (case-insensitive)."""
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValueError(f"empty {enum_cls.__name__.lower()}")
    if cleaned.isdigit():
        number = int(cleaned)
        # Months are written 1-12; weekdays 1-7 starting on Monday
        value = number if enum_cls is Month else number - 1
        try:
            return enum_cls(value)
        except ValueError:
            raise ValueError(f"invalid {enum_cls.__name__.lower()} number: {text}") from None
    matches = [member for member in enum_cls if member.name.startswith(cleaned)]
    exact = [member for member in matches if member.name == cleaned]
    if exact:
        return exact[0]
    if len(matches) != 1:
        kind = "ambiguous" if matches else "unknown"
        raise ValueError(f"{kind} {enum_cls.__name__.lower()}: {text}")
    return matches[0]


def parse_month(text: str) -> Month:
    return _parse_enum(Month, text)


def parse_weekday(text: str) -> Weekday:
    return _parse_enum(Weekday, text)

# =========================
# Board labels
# =========================
class LabelKind(Enum):
    MONTH = "month"
    DAY = "day"
    WEEKDAY = "weekday"
    UNLABELED = "unlabeled"


class BoardLabel(NamedTuple):
    kind: LabelKind
    value: Union[Month, Weekday, int, None] = None

    @property
    def text(self) -> str:
        if self.kind is LabelKind.DAY:
            return str(self.value)
        if self.kind is LabelKind.UNLABELED:
            return ""
        return self.value.short_name  # type: ignore[union-attr]


def _month(month: Month) -> BoardLabel:
    return BoardLabel(LabelKind.MONTH, month)


def _day(day: int) -> BoardLabel:
    return BoardLabel(LabelKind.DAY, day)


def _weekday(weekday: Weekday) -> BoardLabel:
    return BoardLabel(LabelKind.WEEKDAY, weekday)


_BLANK = BoardLabel(LabelKind.UNLABELED)

BOARD_LABELS: Tuple[Tuple[BoardLabel, ...], ...] = (
    tuple(_month(Month(number)) for number in range(1, 7)),
    tuple(_month(Month(number)) for number in range(7, 13)),
    tuple(_day(day) for day in range(1, 7)),
    tuple(_day(day) for day in range(7, 13)),
    tuple(_day(day) for day in range(13, 19)),
    tuple(_day(day) for day in range(19, 25)),
    tuple(_day(day) for day in range(25, 31)),
    (_day(31), _BLANK, _BLANK, _weekday(Weekday.MONDAY), _weekday(Weekday.TUESDAY), _weekday(Weekday.WEDNESDAY)),
    (_BLANK, _BLANK, _weekday(Weekday.THURSDAY), _weekday(Weekday.FRIDAY), _weekday(Weekday.SATURDAY), _weekday(Weekday.SUNDAY)),
)


def label_at(x: int, y: int) -> BoardLabel:
    return BOARD_LABELS[y][x]

# =========================
# Target dates
# =========================
class TargetDate(NamedTuple):
    month: Month
    day_of_month: int
    weekday: Weekday

    @classmethod
    def from_date(cls, date: datetime.date) -> "TargetDate":
        return cls(Month(date.month), date.day, Weekday(date.weekday()))

    def winning_mask(self) -> Optional[BoardMask]:
        """Return the board with this date's three label cells cleared.

        Returns None when the day cannot exist in the month (the board has no year, so
        February allows 29) or when a label is missing. A label that appears twice means
        BOARD_LABELS is broken and raises RuntimeError.
        """
        if not 1 <= self.day_of_month <= 31:
            return None
        if self.day_of_month > self.month.number_days(leap_year=True):
            return None

        wanted = (
            _month(self.month),
            _day(self.day_of_month),
            _weekday(self.weekday),
        )
        found = {label: 0 for label in wanted}
        out = BoardMask.filled()
        for x, y in iter_coordinates():
            label = label_at(x, y)
            if label in found:
                if found[label]:
                    raise RuntimeError(f"duplicate board label {label.kind.value} {label.text}")
                found[label] = 1
                out = out.with_covered(x, y, False)

        missing = [label for label, count in found.items() if not count]
        if missing:
            LOGGER.warning("No board label for %s", ", ".join(label.text for label in missing))
            return None
        return out

    def next(self, leap_year: bool) -> Optional["TargetDate"]:
        """Return the following day, or None after December 31."""
        next_weekday = self.weekday.next()
        next_day = self.month.next_day(self.day_of_month, leap_year)
        if next_day is not None:
            return TargetDate(self.month, next_day, next_weekday)
        next_month = self.month.next()
        if next_month is None:
            return None
        return TargetDate(next_month, 1, next_weekday)

    def __str__(self) -> str:
        return f"{self.weekday.short_name} {self.month.short_name} {self.day_of_month}"


def iter_target_dates(start: TargetDate, leap_year: bool) -> Iterator[TargetDate]:
    """Yield start and every following day through December 31."""
    current: Optional[TargetDate] = start
    while current is not None:
        yield current
        current = current.next(leap_year)


def parse_target(month: str, day_of_month: str, weekday: str) -> TargetDate:
    """Parse CLI strings into a TargetDate. Raises ValueError on unknown names or a non-numeric day."""
    day_text = day_of_month.strip()
    if not day_text.lstrip("-").isdigit():
        raise ValueError(f"invalid day of month: {day_of_month}")
    return TargetDate(parse_month(month), int(day_text), parse_weekday(weekday))


def parse_iso_date(text: str) -> TargetDate:
    """Parse YYYY-MM-DD into a TargetDate with its real weekday."""
    return TargetDate.from_date(datetime.date.fromisoformat(text.strip()))
