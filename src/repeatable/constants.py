#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import re

ISO_DATE_PATTERN = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
ISO_DATE_FORMAT = "%Y-%m-%d"
MIN_MONTH, MAX_MONTH = 1, 12
MIN_DAY, MAX_DAY = 1, 31
NOT_FOUND = None
"""Returned by lookups which do not find a match."""
BASE_OBJECT_KEY = "__BASE_OBJECT__"
CIRCULAR_REFERENCE_TEMPLATE = "[circular reference of {}]"
UPPER_FIRST = "UpperFirst"
LOWER_FIRST = "lowerFirst"
