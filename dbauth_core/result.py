"""Authentication outcome returned by DbTableAuthAdapter.authenticate()."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, List


class ResultCode(IntEnum):
    """Outcome codes. Anything above zero is a success."""

    SUCCESS = 1
    FAILURE = 0
    FAILURE_IDENTITY_NOT_FOUND = -1
    FAILURE_IDENTITY_AMBIGUOUS = -2
    FAILURE_CREDENTIAL_INVALID = -3
    FAILURE_UNCATEGORIZED = -4


@dataclass
class AuthResult:
    """Result of one authentication attempt."""

    code: ResultCode
    identity: Any = None
    messages: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.code > 0

    def __bool__(self) -> bool:
        return self.is_valid
