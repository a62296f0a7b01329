#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from typing import Iterator

import pytest

from repeatable.config import reset_config
from repeatable.repeatable_event import RepeatableEvent


@pytest.fixture(scope="function", autouse=True)
def default_config() -> Iterator[None]:
    """Autouse fixture restoring the default configuration around each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def first_event() -> RepeatableEvent:
    return RepeatableEvent("2001-01-01", "daily", {"label": "My Event"})


@pytest.fixture
def monthly_event() -> RepeatableEvent:
    return RepeatableEvent("2001-01-01", "monthly")
