"""
Fixed-width field helpers shared by the header decoder and encoder.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
import re
from typing import Any, Optional

from .errors import MalformedFieldError

VALID_GNSS_TIME_SYSTEM_IDS = ["GPS", "GLO", "GAL", "QZS", "BDT", "IRN"]
VALID_TIME_SYSTEM_IDS = VALID_GNSS_TIME_SYSTEM_IDS + ["UTC", "TAI"]

_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_DECIMAL_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)$")


@dataclass
class TimeOfObs:
    epoch: datetime
    time_system: str


def parse_text_field(line: str, start: int, width: int) -> str:
    return line[start : start + width].strip()


def parse_int_field(
    line: str,
    start: int,
    width: int,
    record: Any,
    name: str,
    blank: Optional[int] = None,
) -> int:
    """
    Parses an integer field; a blank field yields `blank` when given, otherwise it is an error.
    """
    text = line[start : start + width].strip()
    if not text and blank is not None:
        return blank
    if not _INT_PATTERN.match(text):
        raise MalformedFieldError(name, record, text)
    return int(text)


def parse_float_field(
    line: str,
    start: int,
    width: int,
    record: Any,
    name: str,
    blank: Optional[float] = None,
) -> float:
    text = line[start : start + width].strip()
    if not text and blank is not None:
        return blank
    if not _DECIMAL_PATTERN.match(text):
        raise MalformedFieldError(name, record, text)
    return float(text)


def format_text_field(value: str, width: int) -> str:
    return f"{value[:width]:<{width}}"


def parse_time_of_obs(line: str, record: Any) -> TimeOfObs:
    year = parse_int_field(line, 0, 6, record, "year")
    month = parse_int_field(line, 6, 6, record, "month")
    day = parse_int_field(line, 12, 6, record, "day")
    hour = parse_int_field(line, 18, 6, record, "hour")
    minute = parse_int_field(line, 24, 6, record, "minute")
    seconds = parse_float_field(line, 30, 13, record, "seconds")
    time_system = line[48:51].strip()
    if time_system and time_system not in VALID_TIME_SYSTEM_IDS:
        raise MalformedFieldError("time system", record, time_system)
    whole_seconds = int(seconds)
    microseconds = int(round((seconds - whole_seconds) * 1e6))
    try:
        epoch = datetime(year, month, day, hour, minute) + timedelta(
            seconds=whole_seconds, microseconds=microseconds
        )
    except ValueError:
        raise MalformedFieldError("epoch", record, line[:43].strip()) from None
    return TimeOfObs(epoch, time_system)


def format_time_of_obs(time_of_obs: TimeOfObs) -> str:
    epoch = time_of_obs.epoch
    seconds = epoch.second + epoch.microsecond / 1e6
    return (
        f"{epoch.year:6}{epoch.month:6}{epoch.day:6}{epoch.hour:6}{epoch.minute:6}"
        f"{seconds:13.7f}{time_of_obs.time_system:>8}"
    )
