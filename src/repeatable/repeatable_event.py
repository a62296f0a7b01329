#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Dates which repeat on a yearly, monthly or daily schedule."""

import datetime
import logging
from collections.abc import Callable, Generator, Mapping
from typing import Any, NamedTuple, Self

from pydantic import BaseModel, ConfigDict

from repeatable.config import get_config
from repeatable.constants import ISO_DATE_FORMAT
from repeatable.exceptions import (
    LineageTypeError,
    RepeatLimitError,
    TemporalInversionError,
)
from repeatable.time_utils import (
    DateInput,
    Schedule,
    advance,
    iterate_dates,
    parse_date_input,
    schedule_unit,
)

logger = logging.getLogger(__name__)


class EventOptions(BaseModel):
    """Options shared by an event and every event repeated from it.

    Parameters
    ----------
    label
        Free text describing the event.

    Notes
    -----
    Keys other than `label` are kept as extra fields.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    label: str | None = None


class Repetition(NamedTuple):
    """Passed to `on_repeat` callbacks: the event `next()` was called on and
    the event it returned."""

    from_: "RepeatableEvent"
    to: "RepeatableEvent"


RepeatCallback = Callable[[Repetition], Any]


class RepeatableEvent:
    """One occurrence of a recurring date.

    Parameters
    ----------
    date
        An ISO formatted (`yyyy-mm-dd`) string, a date or a datetime. Only the
        calendar date is kept.
    schedule
        How often the event recurs. Strings are matched ignoring case.
    options
        An `EventOptions` instance or a mapping validated into one. Events
        returned by `next()` share these options.

    Raises
    ------
    InvalidDateError
        If `date` is a string which is not a valid `yyyy-mm-dd` date.
    DateInputTypeError
        If `date` is neither a string nor a date.
    InvalidScheduleError
        If `schedule` is not one of yearly, monthly or daily.

    Notes
    -----
    1. Instances are never modified after construction, apart from the
    registration of `on_repeat` callbacks.
    2. Lineage is tracked by identity: `ancestors` holds the actual events
    this one was derived from, oldest first.
    """

    def __init__(
        self,
        date: DateInput,
        schedule: Schedule | str,
        options: EventOptions | Mapping[str, Any] | None = None,
    ):
        self._date = parse_date_input(date)
        self._schedule = Schedule.parse(schedule)
        if options is None:
            options = EventOptions()
        elif not isinstance(options, EventOptions):
            options = EventOptions.model_validate(options)
        self.original_options = options
        self._ancestors: tuple[RepeatableEvent, ...] = ()
        self._repeat_callbacks: list[RepeatCallback] = []
        logger.debug(f"Created {self!r}")

    @property
    def date(self) -> datetime.date:
        return self._date

    @property
    def schedule(self) -> Schedule:
        return self._schedule

    @property
    def label(self) -> str | None:
        return self.original_options.label

    @property
    def ancestors(self) -> tuple["RepeatableEvent", ...]:
        return self._ancestors

    def _derive(
        self, date: datetime.date, ancestors: tuple["RepeatableEvent", ...]
    ) -> Self:
        event = type(self)(date, self._schedule, self.original_options)
        event._ancestors = ancestors
        return event

    def next_date(self) -> datetime.date:
        """The date one schedule unit after this event."""
        return advance(self._date, schedule_unit(self._schedule))

    def next(self) -> Self:
        """Return the following occurrence of this event.

        Callbacks registered on this instance with `on_repeat` are called, in
        registration order, before returning.
        """
        repeated = self._derive(self.next_date(), self._ancestors + (self,))
        transition = Repetition(from_=self, to=repeated)
        if self._repeat_callbacks:
            logger.debug(
                f"Notifying {len(self._repeat_callbacks)} callbacks of "
                f"repetition {self._date} -> {repeated.date}"
            )
        for callback in list(self._repeat_callbacks):
            callback(transition)
        return repeated

    def occurrences(self) -> Generator[datetime.date, None, None]:
        """Lazily generate the dates of all following occurrences."""
        return iterate_dates(self._date, schedule_unit(self._schedule))

    def num_repeats_until(self, target_date: DateInput) -> int:
        """Count the full schedule steps from this event up to `target_date`.

        A step landing exactly on `target_date` is counted, a step beyond it
        is not, so 0 is returned if the first step already overshoots.

        Raises
        ------
        TemporalInversionError
            If `target_date` is before the date of this event.
        RepeatLimitError
            If the count exceeds the configured `events.max_repeats`.
        """
        target = parse_date_input(target_date)
        if target < self._date:
            raise TemporalInversionError(
                f"Cannot repeat from {self._date.isoformat()} until "
                f"{target.isoformat()}: the target date is in the past."
            )
        max_repeats = get_config().events.max_repeats
        count = 0
        for occurrence in self.occurrences():
            if occurrence > target:
                break
            count += 1
            if max_repeats is not None and count > max_repeats:
                raise RepeatLimitError(
                    f"Repeating {self._schedule} from {self._date.isoformat()} until "
                    f"{target.isoformat()} exceeds the limit of {max_repeats} repeats."
                )
        return count

    def repeat_until(self, target_date: DateInput) -> list[Self]:
        """The successive occurrences after this event, up to and including
        the last one on or before `target_date`. Each element is the `next()`
        of the previous one.

        Raises
        ------
        Same as `num_repeats_until`.
        """
        repeats = []
        current = self
        for _ in range(self.num_repeats_until(target_date)):
            current = current.next()
            repeats.append(current)
        return repeats

    def clone(self) -> Self:
        """A copy sharing the lineage, options and `on_repeat` callbacks of this
        event. Later registrations on either copy do not affect the other."""
        event = self._derive(self._date, self._ancestors)
        event._repeat_callbacks = list(self._repeat_callbacks)
        return event

    def is_iteration_of(self, candidate: "RepeatableEvent") -> bool:
        """Check whether this event was derived from `candidate` through one or
        more calls to `next()`."""
        if not isinstance(candidate, RepeatableEvent):
            raise LineageTypeError(
                f"Expected a RepeatableEvent, got {type(candidate).__name__}."
            )
        return any(ancestor is candidate for ancestor in self._ancestors)

    def on_repeat(self, callback: RepeatCallback) -> RepeatCallback:
        """Call `callback` each time `next()` is called on this instance.

        Events returned by `next()` do not inherit the callback. Returns
        `callback`, so this can be used as a decorator.
        """
        if callback in self._repeat_callbacks:
            logger.warning(
                f"Callback {callback!r} is already registered on {self!r}, "
                f"it will be called more than once per repetition."
            )
        self._repeat_callbacks.append(callback)
        return callback

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(date={self._date.isoformat()!r}, "
            f"schedule={self._schedule.value!r}, label={self.label!r})"
        )

    def __str__(self) -> str:
        date_str = self._date.strftime(ISO_DATE_FORMAT)
        display = f"'{self.label}'" if self.label else "Event"
        display += f" repeating {self._schedule} from {date_str}"
        if self._ancestors:
            display += f" (repetition {len(self._ancestors)})"
        return display
