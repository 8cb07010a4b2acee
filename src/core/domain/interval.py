import re
from dataclasses import dataclass
from enum import Enum

from core.exceptions.duration_parse_error import (
    InvalidFormatError,
    InvalidMagnitudeError,
    UnknownUnitError,
)

DURATION_PATTERN = r"(\d+)(h|min|s|ms)"


class TimeUnit(str, Enum):
    HOURS = "h"
    MINUTES = "min"
    SECONDS = "s"
    MILLISECONDS = "ms"

    @property
    def milliseconds(self) -> int:
        mapping = {
            TimeUnit.HOURS: 3_600_000,
            TimeUnit.MINUTES: 60_000,
            TimeUnit.SECONDS: 1_000,
            TimeUnit.MILLISECONDS: 1,
        }

        return mapping[self]

    @classmethod
    def from_token(cls, token: str) -> "TimeUnit":
        try:
            return cls(token.lower())
        except ValueError:
            raise UnknownUnitError(token) from None


@dataclass(frozen=True)
class Interval:
    value: int
    unit: TimeUnit

    def __post_init__(self):
        if self.value <= 0:
            raise ValueError(f"Interval value must be greater than 0: {self.value}")

    def to_milliseconds(self) -> int:
        return self.value * self.unit.milliseconds

    def to_seconds(self) -> float:
        return self.to_milliseconds() / 1_000

    def __str__(self) -> str:
        return f"{self.value}{self.unit.value}"


DEFAULT_INTERVAL = Interval(30, TimeUnit.SECONDS)


def parse_interval(text: str) -> Interval:
    """Parse a duration such as ``30s``, ``5min``, ``1h`` or ``200ms``.

    The whole string must match; surrounding whitespace is rejected.
    """
    match = re.fullmatch(DURATION_PATTERN, text, flags=re.IGNORECASE | re.ASCII)

    if match is None:
        raise InvalidFormatError(text)

    magnitude = int(match.group(1))
    if magnitude == 0:
        raise InvalidMagnitudeError(text)

    return Interval(magnitude, TimeUnit.from_token(match.group(2)))
