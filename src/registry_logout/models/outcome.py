"""Model for the result of a logout."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Self


class OutcomeKind(Enum):
    """What happened when the user asked to log out."""

    REMOVED_ONE = "removed one"
    REMOVED_ALL = "removed all"
    NOT_LOGGED_IN = "not logged in"
    FOREIGN_LOGIN = "foreign login"
    FAILURE = "failure"


@dataclass(frozen=True)
class LogoutOutcome:
    """Result of one logout, handed back to the caller for display.

    ``FOREIGN_LOGIN`` means the store had nothing it could remove for the
    host, yet a credential kept elsewhere (``source``) still authenticates
    against the registry.  ``cause`` is set only for ``FAILURE``.
    """

    kind: OutcomeKind
    host: str = ""
    cause: Exception | None = None
    source: Path | None = None

    @classmethod
    def removed_one(cls, host: str) -> Self:
        return cls(kind=OutcomeKind.REMOVED_ONE, host=host)

    @classmethod
    def removed_all(cls) -> Self:
        return cls(kind=OutcomeKind.REMOVED_ALL)

    @classmethod
    def not_logged_in(cls, host: str) -> Self:
        return cls(kind=OutcomeKind.NOT_LOGGED_IN, host=host)

    @classmethod
    def foreign_login(cls, host: str, source: Path | None = None) -> Self:
        return cls(kind=OutcomeKind.FOREIGN_LOGIN, host=host, source=source)

    @classmethod
    def failure(cls, host: str, cause: Exception) -> Self:
        return cls(kind=OutcomeKind.FAILURE, host=host, cause=cause)

    @property
    def is_failure(self) -> bool:
        return self.kind == OutcomeKind.FAILURE
