"""Exceptions raised while removing registry credentials."""

__all__ = [
    "AuthProbeError",
    "CredentialStoreError",
    "InvalidRequestError",
    "LogoutFailedError",
    "NotLoggedInError",
    "ProbeCancelledError",
    "RegistryLogoutError",
]


class RegistryLogoutError(Exception):
    """Base class for registry logout errors."""


class InvalidRequestError(RegistryLogoutError):
    """The logout request names both a registry and all registries, or
    neither.
    """


class NotLoggedInError(RegistryLogoutError):
    """The credential store holds no removable entry for the registry."""

    def __init__(self, host: str) -> None:
        self.host = host
        super().__init__(f"not logged into {host}")


class CredentialStoreError(RegistryLogoutError):
    """The credential store could not be read or written."""


class AuthProbeError(RegistryLogoutError):
    """Credentials could not be verified against the registry."""


class ProbeCancelledError(RegistryLogoutError):
    """Credential verification was cancelled or ran out of time."""


class LogoutFailedError(RegistryLogoutError):
    """Wrap a store or probe error with the operation and host involved.

    Parameters
    ----------
    operation
        What was being attempted, for instance ``"reading auth file for"``.
    host
        Registry host, or the empty string for all registries.
    error
        Underlying exception; also chained as ``__cause__``.
    """

    def __init__(
        self, operation: str, host: str, error: BaseException
    ) -> None:
        self.operation = operation
        self.host = host
        self.error = error
        target = f" {host!r}" if host else ""
        super().__init__(f"error {operation}{target}: {error}")
        self.__cause__ = error
