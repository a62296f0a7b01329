#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""A light wrapper around the `datetime` library, containing the schedule
enumeration, parsing of user supplied dates and the calendar-aware
arithmetic used to advance repeating events."""

import datetime
from collections.abc import Generator
from enum import StrEnum, auto
from typing import Literal, Self

from dateutil.relativedelta import relativedelta

from repeatable.constants import (
    ISO_DATE_PATTERN,
    MAX_DAY,
    MAX_MONTH,
    MIN_DAY,
    MIN_MONTH,
    NOT_FOUND,
)
from repeatable.exceptions import (
    DateInputTypeError,
    InvalidDateError,
    InvalidScheduleError,
)
from repeatable.object_utils import object_key_for_value

DateInput = str | datetime.date | datetime.datetime
"""An ISO formatted (`yyyy-mm-dd`) string, a date or a datetime."""

ScheduleUnit = Literal["years", "months", "days"]

BASE_DATE_ERROR_MESSAGE = "When given a string, the only valid format is `yyyy-mm-dd`."


class Schedule(StrEnum):
    """How often a repeatable event recurs."""

    YEARLY = auto()
    MONTHLY = auto()
    DAILY = auto()

    @classmethod
    def parse(cls, value: "Schedule | str") -> Self:
        """Resolve a schedule name, ignoring case.

        Raises
        ------
        InvalidScheduleError if `value` does not name a schedule.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        raise InvalidScheduleError(f'Invalid schedule type "{value}" given')


SCHEDULE_UNITS: dict[ScheduleUnit, Schedule] = {
    "years": Schedule.YEARLY,
    "months": Schedule.MONTHLY,
    "days": Schedule.DAILY,
}


def schedule_unit(schedule: Schedule) -> ScheduleUnit:
    """The `relativedelta` keyword advancing a date by one `schedule` step."""
    unit = object_key_for_value(schedule, SCHEDULE_UNITS)
    if unit is NOT_FOUND:
        raise InvalidScheduleError(f'Invalid schedule type "{schedule}" given')
    return unit


def validate_date_string(value: str) -> tuple[int, int, int]:
    """Check `value` is formatted as `yyyy-mm-dd` with a plausible month and day.

    Both the month and the day are checked before raising so that a single
    error reports every offending field.

    Returns
    -------
    The year, month and day parsed from `value`.
    """
    match = ISO_DATE_PATTERN.fullmatch(value)
    if match is None:
        raise InvalidDateError(BASE_DATE_ERROR_MESSAGE)
    year, month, day = (int(part) for part in match.groups())
    errors = []
    if not MIN_MONTH <= month <= MAX_MONTH:
        errors.append(
            f"The month, which should be {MIN_MONTH} through {MAX_MONTH}, "
            f"was given as {month}."
        )
    if not MIN_DAY <= day <= MAX_DAY:
        errors.append(
            f"The day, which should be {MIN_DAY} through {MAX_DAY}, "
            f"was given as {day}."
        )
    if errors:
        raise InvalidDateError(" ".join([BASE_DATE_ERROR_MESSAGE, *errors]))
    return year, month, day


def parse_date_input(value: DateInput) -> datetime.date:
    """Normalise a date input to a `datetime.date`. The time of a `datetime`
    is discarded."""
    # nb: datetime is a subclass of date so it has to be checked first
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str):
        raise DateInputTypeError(
            "The only valid options when setting a date are `datetime.date`, "
            "`datetime.datetime`, or a string (ISO format). "
            f"Got {type(value).__name__}."
        )
    year, month, day = validate_date_string(value)
    try:
        return datetime.date(year, month, day)
    except ValueError as e:
        raise InvalidDateError(f"{value} is not a valid calendar date: {e}.") from e


def advance(date: datetime.date, unit: ScheduleUnit, n: int = 1) -> datetime.date:
    """Offset `date` by `n` units. Month and year offsets clamp to the last
    day of the resulting month (eg Jan 31 + 1 month is Feb 28)."""
    return date + relativedelta(**{unit: n})


def iterate_dates(
    start: datetime.date, unit: ScheduleUnit
) -> Generator[datetime.date, None, None]:
    """Unbounded sequence of dates after `start`, each one `unit` after the
    previous date. Clamping therefore carries forward (Jan 31, Feb 28, Mar 28)."""
    current = start
    while True:
        current = advance(current, unit)
        yield current
