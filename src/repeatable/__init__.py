#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from importlib.metadata import PackageNotFoundError, version  # pragma: no cover

try:
    # Change here if project is renamed and does not equal the package name
    dist_name = "repeatable-events"
    __version__ = version(dist_name)
except PackageNotFoundError:  # pragma: no cover
    __version__ = "unknown"
finally:
    del version, PackageNotFoundError

from repeatable.config import get_config, load_config, override_config, reset_config
from repeatable.exceptions import (
    DateInputTypeError,
    InvalidDateError,
    InvalidScheduleError,
    LineageTypeError,
    RepeatLimitError,
    TemporalInversionError,
    TraversalError,
)
from repeatable.repeatable_event import (
    EventOptions,
    RepeatableEvent,
    Repetition,
    RepeatCallback,
)
from repeatable.time_utils import DateInput, Schedule
