#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
class InvalidDateError(ValueError):
    pass


class InvalidScheduleError(ValueError):
    pass


class DateInputTypeError(TypeError):
    pass


class TemporalInversionError(ValueError):
    """Raised when a target date precedes the date of the event it is
    measured from."""


class RepeatLimitError(ValueError):
    pass


class LineageTypeError(TypeError):
    pass


class TraversalError(ValueError):
    pass
