#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import logging

import pytest
from pydantic import ValidationError

from repeatable.exceptions import (
    DateInputTypeError,
    InvalidDateError,
    InvalidScheduleError,
    LineageTypeError,
    TemporalInversionError,
)
from repeatable.repeatable_event import EventOptions, RepeatableEvent, Repetition
from repeatable.time_utils import Schedule


@pytest.mark.parametrize("date_str", ["2001-01-01", "1999-12-31", "2024-02-29"])
def test_date_string_round_trip(date_str: str):
    event = RepeatableEvent(date_str, "monthly")
    assert event.date == datetime.date.fromisoformat(date_str)
    assert event.date.isoformat() == date_str


def test_constructs_from_dates():
    assert RepeatableEvent(datetime.date(2001, 1, 1), "daily").date == datetime.date(
        2001, 1, 1
    )
    assert RepeatableEvent(
        datetime.datetime(2001, 1, 1, 12, 30), "daily"
    ).date == datetime.date(2001, 1, 1)


def test_disallows_strings_other_than_iso_dates():
    with pytest.raises(InvalidDateError):
        RepeatableEvent("01-01", "monthly")


def test_catches_the_simplest_mistakes_about_the_date_string():
    with pytest.raises(InvalidDateError, match="13"):
        RepeatableEvent("2001-13-01", "monthly")
    with pytest.raises(InvalidDateError, match="32"):
        RepeatableEvent("2001-10-32", "monthly")


def test_rejects_unsupported_date_types():
    with pytest.raises(DateInputTypeError):
        RepeatableEvent(978307200, "monthly")


def test_validates_date_before_schedule():
    with pytest.raises(InvalidDateError):
        RepeatableEvent("2001-13-01", "monthlly")


def test_schedule_is_parsed_ignoring_case():
    assert RepeatableEvent("2001-01-01", "MoNtHlY").schedule is Schedule.MONTHLY


def test_invalid_schedule_is_named_in_error():
    with pytest.raises(InvalidScheduleError, match="monthlly"):
        RepeatableEvent("2001-01-01", "monthlly")


def test_constructs_with_a_label(first_event: RepeatableEvent):
    assert first_event.label == "My Event"
    assert isinstance(first_event.original_options, EventOptions)


def test_label_is_optional(monthly_event: RepeatableEvent):
    assert monthly_event.label is None


def test_extra_options_are_kept():
    event = RepeatableEvent("2001-01-01", "daily", {"label": "x", "colour": "red"})
    assert event.next().original_options.colour == "red"


def test_invalid_options_are_rejected():
    with pytest.raises(ValidationError):
        RepeatableEvent("2001-01-01", "daily", {"label": 5})


def test_new_event_has_no_ancestors(first_event: RepeatableEvent):
    assert first_event.ancestors == ()


def test_next_returns_a_new_event(monthly_event: RepeatableEvent):
    repeated = monthly_event.next()
    assert isinstance(repeated, RepeatableEvent)
    assert repeated is not monthly_event
    assert monthly_event.date == datetime.date(2001, 1, 1)


@pytest.mark.parametrize(
    "schedule, expected",
    [
        ("monthly", datetime.date(2001, 2, 1)),
        ("daily", datetime.date(2001, 1, 2)),
        ("yearly", datetime.date(2002, 1, 1)),
    ],
)
def test_next_date_follows_schedule(schedule: str, expected: datetime.date):
    event = RepeatableEvent("2001-01-01", schedule)
    assert event.next().date == expected
    assert event.next_date() == expected


def test_next_clamps_month_overflow():
    event = RepeatableEvent("2001-01-31", "monthly")
    assert event.next().date == datetime.date(2001, 2, 28)
    assert event.next().next().date == datetime.date(2001, 3, 28)


def test_next_keeps_schedule_and_options(first_event: RepeatableEvent):
    repeated = first_event.next().next()
    assert repeated.schedule is first_event.schedule
    assert repeated.label == "My Event"
    assert repeated.original_options is first_event.original_options


def test_next_extends_ancestors(first_event: RepeatableEvent):
    second = first_event.next()
    third = second.next()
    assert second.ancestors == (first_event,)
    assert third.ancestors[0] is first_event
    assert third.ancestors[1] is second


@pytest.mark.parametrize(
    "target, expected",
    [("2001-01-01", 0), ("2001-01-02", 1), ("2001-01-03", 2), ("2002-01-01", 365)],
)
def test_num_repeats_until_daily(
    first_event: RepeatableEvent, target: str, expected: int
):
    assert first_event.num_repeats_until(target) == expected


def test_num_repeats_until_excludes_partial_steps(monthly_event: RepeatableEvent):
    assert monthly_event.num_repeats_until("2001-01-03") == 0
    assert monthly_event.num_repeats_until("2001-02-01") == 1
    assert monthly_event.num_repeats_until(datetime.date(2001, 12, 31)) == 11


def test_num_repeats_until_rejects_past_targets(first_event: RepeatableEvent):
    with pytest.raises(TemporalInversionError):
        first_event.num_repeats_until("2000-01-01")
    with pytest.raises(TemporalInversionError):
        first_event.repeat_until("2000-01-01")


def test_num_repeats_until_validates_target(first_event: RepeatableEvent):
    with pytest.raises(InvalidDateError, match="13"):
        first_event.num_repeats_until("2001-13-01")


@pytest.mark.parametrize("schedule", ["yearly", "monthly", "daily"])
@pytest.mark.parametrize(
    "target", ["2001-01-31", "2001-02-28", "2001-03-15", "2004-02-29"]
)
def test_repeat_until_matches_count(schedule: str, target: str):
    event = RepeatableEvent("2001-01-31", schedule)
    assert len(event.repeat_until(target)) == event.num_repeats_until(target)


def test_repeat_until_returns_successive_events(first_event: RepeatableEvent):
    repeats = first_event.repeat_until("2001-01-04")
    assert [r.date for r in repeats] == [
        datetime.date(2001, 1, 2),
        datetime.date(2001, 1, 3),
        datetime.date(2001, 1, 4),
    ]
    assert repeats[0].ancestors == (first_event,)
    assert repeats[2].ancestors[-1] is repeats[1]
    assert all(r.is_iteration_of(first_event) for r in repeats)


def test_repeat_until_is_empty_when_first_step_overshoots(
    monthly_event: RepeatableEvent,
):
    assert monthly_event.repeat_until("2001-01-31") == []


def test_occurrences_is_restartable(monthly_event: RepeatableEvent):
    first_run = monthly_event.occurrences()
    assert next(first_run) == datetime.date(2001, 2, 1)
    assert next(first_run) == datetime.date(2001, 3, 1)
    assert next(monthly_event.occurrences()) == datetime.date(2001, 2, 1)


def test_clone_shares_lineage(first_event: RepeatableEvent):
    second = first_event.next()
    cloned = second.clone()
    assert cloned is not second
    assert cloned.date == second.date
    assert cloned.schedule is second.schedule
    assert cloned.original_options is second.original_options
    assert cloned.ancestors == second.ancestors
    assert cloned.ancestors[0] is first_event


def test_is_iteration_of(first_event: RepeatableEvent):
    assert first_event.next().is_iteration_of(first_event)
    assert first_event.next().next().is_iteration_of(first_event)
    assert first_event.next().clone().is_iteration_of(first_event)


def test_is_iteration_of_unrelated_event(first_event: RepeatableEvent):
    unrelated = RepeatableEvent("2001-01-01", "daily", {"label": "My Event"})
    assert not unrelated.next().is_iteration_of(first_event)
    assert not first_event.is_iteration_of(first_event)
    assert not first_event.is_iteration_of(first_event.next())


def test_is_iteration_of_requires_an_event(first_event: RepeatableEvent):
    with pytest.raises(LineageTypeError):
        first_event.is_iteration_of("2001-01-01")


def test_on_repeat_fires_for_each_next(first_event: RepeatableEvent):
    calls: list[Repetition] = []
    first_event.on_repeat(calls.append)
    second = first_event.next()
    other_second = first_event.next()
    assert len(calls) == 2
    assert calls[0].from_ is first_event
    assert calls[0].to is second
    assert calls[1].to is other_second


def test_on_repeat_is_not_inherited(first_event: RepeatableEvent):
    parent_calls: list[Repetition] = []
    child_calls: list[Repetition] = []
    first_event.on_repeat(parent_calls.append)
    child = first_event.next()
    child.on_repeat(child_calls.append)
    grandchild = child.next()
    assert len(parent_calls) == 1
    assert len(child_calls) == 1
    assert child_calls[0] == Repetition(from_=child, to=grandchild)


def test_on_repeat_runs_callbacks_in_registration_order(first_event: RepeatableEvent):
    order = []

    @first_event.on_repeat
    def first(repetition: Repetition):
        order.append("first")

    first_event.on_repeat(lambda repetition: order.append("second"))
    first_event.next()
    assert order == ["first", "second"]
    assert callable(first)


def test_repeat_until_fires_each_callback_once(first_event: RepeatableEvent):
    calls: list[Repetition] = []
    first_event.on_repeat(calls.append)
    first_event.repeat_until("2001-01-05")
    assert len(calls) == 1


def test_duplicate_callback_registration_warns(
    first_event: RepeatableEvent, caplog: pytest.LogCaptureFixture
):
    calls: list[Repetition] = []

    def callback(repetition: Repetition):
        calls.append(repetition)

    with caplog.at_level(logging.WARNING, logger="repeatable.repeatable_event"):
        first_event.on_repeat(callback)
        first_event.on_repeat(callback)
    assert "already registered" in caplog.text
    first_event.next()
    assert len(calls) == 2


def test_clone_copies_callbacks(first_event: RepeatableEvent):
    calls: list[Repetition] = []
    first_event.on_repeat(calls.append)
    cloned = first_event.clone()
    cloned.on_repeat(lambda repetition: None)
    cloned.next()
    assert len(calls) == 1
    assert len(first_event._repeat_callbacks) == 1


def test_string_representations(first_event: RepeatableEvent):
    assert repr(first_event) == (
        "RepeatableEvent(date='2001-01-01', schedule='daily', label='My Event')"
    )
    assert str(first_event) == "'My Event' repeating daily from 2001-01-01"
    assert str(first_event.next()).endswith("(repetition 1)")
