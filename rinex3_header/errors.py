"""
Errors raised while decoding or encoding a RINEX 3 observation header.

Every error here is fatal for the decode/encode session that raised it.
"""

from dataclasses import dataclass
from typing import Any, Generic, List, Optional, TypeVar


def _describe(record: Any) -> str:
    return getattr(record, "label", str(record))


class RinexHeaderError(ValueError):
    recoverable: bool = False

    def __init__(self, message: str, details: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: List[str] = list(details) if details else []

    def add_detail(self, text: str) -> None:
        self.details.append(text)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return "\n".join([self.message] + self.details)


class MalformedLineError(RinexHeaderError):
    def __init__(self, message: str, line_number: Optional[int] = None) -> None:
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)
        self.line_number = line_number


class UnknownRecordLabelError(RinexHeaderError):
    def __init__(self, label: str) -> None:
        super().__init__(f"Unidentified header label: `{label}`")
        self.label = label


class MalformedFieldError(RinexHeaderError):
    def __init__(self, field: str, record: Any, text: str) -> None:
        super().__init__(f"Invalid `{field}` field in `{_describe(record)}`: `{text}`")
        self.field = field
        self.record = record
        self.text = text


class UnsupportedVersionError(RinexHeaderError):
    def __init__(self, version: float) -> None:
        super().__init__(
            f"Unknown or unsupported RINEX version {version}",
            ["Supported versions are 3.00 and 3.01"],
        )
        self.version = version


class InvalidFileTypeError(RinexHeaderError):
    def __init__(self, file_type: str) -> None:
        super().__init__(f"This isn't a RINEX observation file: `{file_type[:1]}`")
        self.file_type = file_type


class InvalidSystemError(RinexHeaderError):
    def __init__(self, system: str) -> None:
        super().__init__(f"Invalid satellite system: `{system}`")
        self.system = system


class IncompleteHeaderError(RinexHeaderError):
    def __init__(self, missing: List[Any], version: Optional[float] = None) -> None:
        details = []
        if version is not None:
            details.append(f"Version = {version:.2f}")
        details += [f"Missing: {kind.label}" for kind in missing]
        super().__init__("Incomplete or invalid header", details)
        self.missing = list(missing)


class UnexpectedContinuationError(RinexHeaderError):
    def __init__(self, record: Any) -> None:
        super().__init__(f"{_describe(record)}: unexpected continuation line")
        self.record = record


T = TypeVar("T")


@dataclass
class HeaderResult(Generic[T]):
    """
    Outcome of a decode or encode session.

    Exactly one of `value` and `error` is set.
    """

    value: Optional[T] = None
    error: Optional[RinexHeaderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore
