from __future__ import annotations

import re
from dataclasses import dataclass

from ..errors import ValidationError


IDENTITY_RE = re.compile(r"^[A-Za-z0-9_.-]{1,32}$")


@dataclass(frozen=True, slots=True)
class Identity:
    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise ValidationError("Identity must be a string")
        v = self.value.strip()
        if not IDENTITY_RE.match(v):
            raise ValidationError("Identity must be 1-32 chars [A-Za-z0-9_.-]")
        object.__setattr__(self, "value", v)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Content:
    value: str

    MAX_LEN = 5000

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValidationError("Content must not be empty")
        if len(self.value) > self.MAX_LEN:
            raise ValidationError(f"Content must be at most {self.MAX_LEN} chars")

    def __str__(self) -> str:
        return self.value
