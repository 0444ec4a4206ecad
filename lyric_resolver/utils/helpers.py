"""
Utility functions and helpers for lyric-resolver
Common functions for duration parsing, hex validation and retry handling
"""

import math
import re
import time
import functools
from typing import Any, Optional, Tuple, Type, Union


# Hex payloads must be non-empty and contain only hex digits
_HEX_PATTERN = re.compile(r"^[0-9a-fA-F]+$")

# "3分45秒" style durations returned by the Chinese catalog
_CHINESE_DURATION = re.compile(r"(\d+)分(\d+)秒")


def is_hex(text: Optional[str]) -> bool:
    """
    Check whether text is a pure, even-length hexadecimal string

    Args:
        text: Candidate ciphertext

    Returns:
        True if text can be decoded with bytes.fromhex
    """
    if not text:
        return False
    return len(text) % 2 == 0 and _HEX_PATTERN.match(text) is not None


def parse_duration(interval: Union[str, int, float, None]) -> int:
    """
    Parse a catalog duration value to whole seconds

    Args:
        interval: Duration as returned by the catalog. Supported shapes are
                  "3分45秒", "3:45", "1:02:03", "225" and plain numbers.

    Returns:
        Duration in seconds, or 0 if the value is missing or unparseable
    """
    if interval is None or isinstance(interval, bool):
        return 0

    if isinstance(interval, (int, float)):
        return int(interval) if math.isfinite(interval) else 0

    if not isinstance(interval, str):
        return 0

    value = interval.strip()
    if not value:
        return 0

    if "分" in value and "秒" in value:
        match = _CHINESE_DURATION.search(value)
        if match:
            return int(match.group(1)) * 60 + int(match.group(2))
        return 0

    if ":" in value:
        return parse_duration_string(value) or 0

    try:
        return int(float(value))
    except (ValueError, OverflowError):
        return 0


def parse_duration_string(duration_str: str) -> Optional[int]:
    """
    Parse duration string to seconds

    Args:
        duration_str: Duration string (e.g., "3:45", "1:23:45")

    Returns:
        Duration in seconds or None if invalid
    """
    try:
        parts = duration_str.split(':')
        if len(parts) == 2:
            # mm:ss
            minutes, seconds = map(int, parts)
            return minutes * 60 + seconds
        elif len(parts) == 3:
            # hh:mm:ss
            hours, minutes, seconds = map(int, parts)
            return hours * 3600 + minutes * 60 + seconds
        else:
            return None
    except (ValueError, IndexError):
        return None


def first_non_empty(*values: Any) -> str:
    """Return the first truthy value converted to str, or an empty string"""
    for value in values:
        if value:
            return str(value)
    return ""


def is_blank(text: Optional[str]) -> bool:
    """True for None, empty or whitespace-only strings"""
    return not text or not text.strip()


def retry_on_failure(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,)
):
    """
    Decorator for retrying functions on failure

    Args:
        max_attempts: Maximum number of attempts
        delay: Initial delay between attempts
        backoff: Delay multiplier for exponential backoff
        exceptions: Exception types that trigger a retry; others propagate at once
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 1
            current_delay = delay

            while True:
                try:
                    return func(*args, **kwargs)
                except exceptions:
                    if attempt >= max_attempts:
                        raise

                    time.sleep(current_delay)
                    current_delay *= backoff
                    attempt += 1

        return wrapper
    return decorator
