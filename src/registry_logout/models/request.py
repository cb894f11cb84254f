"""Model for a single logout request."""

from dataclasses import dataclass
from enum import Enum
from typing import Self

from ..exceptions import InvalidRequestError
from .registry_host import normalize_registry


class LogoutScope(Enum):
    """A logout targets either one registry or every registry."""

    SINGLE = "single"
    ALL = "all"


@dataclass(frozen=True)
class LogoutRequest:
    """What the user asked to log out of.

    Built once per invocation by the command-line layer, which is expected
    to reject a registry combined with ``--all`` before getting here.  The
    policy still checks, via `validate`, and refuses malformed requests
    without touching the credential store.
    """

    scope: LogoutScope | None
    host: str | None = None

    @classmethod
    def single(cls, server: str) -> Self:
        return cls(scope=LogoutScope.SINGLE, host=normalize_registry(server))

    @classmethod
    def all_registries(cls) -> Self:
        return cls(scope=LogoutScope.ALL)

    def validate(self) -> None:
        """Raise `InvalidRequestError` unless exactly one target is set."""
        match self.scope:
            case LogoutScope.ALL:
                if self.host:
                    raise InvalidRequestError(
                        "--all takes no registry argument, "
                        f"but {self.host!r} was given"
                    )
            case LogoutScope.SINGLE:
                if not self.host:
                    raise InvalidRequestError("registry must be given")
            case _:
                raise InvalidRequestError(
                    "either a registry or all registries must be given"
                )
