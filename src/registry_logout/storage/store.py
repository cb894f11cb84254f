"""Abstract superclass for registry credential stores."""

import threading
from abc import ABC, abstractmethod

from ..exceptions import NotLoggedInError
from ..models.credential import CredentialEntry


class CredentialStore(ABC):
    """Collection of methods the logout policy expects of a credential
    store.

    Implementations must make `remove_one` and `remove_all` atomic with
    respect to each other: a concurrent pair of calls must never leave the
    store partially modified.  The policy itself does no locking.
    """

    @abstractmethod
    def remove_one(self, host: str) -> None:
        """Remove the managed entry for ``host``.

        Raises
        ------
        NotLoggedInError
            No removable entry exists for ``host``.
        CredentialStoreError
            The store could not be read or written.
        """
        ...

    @abstractmethod
    def remove_all(self) -> None:
        """Remove every managed entry."""
        ...

    @abstractmethod
    def read_one(self, host: str) -> CredentialEntry | None:
        """Return any entry visible for ``host``, removable or not."""
        ...


class MemoryCredentialStore(CredentialStore):
    """Credential store held entirely in memory.

    ``entries`` are managed by this store and can be removed.  ``foreign``
    entries belong to some other login mechanism: they can be read but
    never removed, and `remove_all` leaves them alone.
    """

    def __init__(
        self,
        entries: dict[str, CredentialEntry] | None = None,
        foreign: dict[str, CredentialEntry] | None = None,
    ) -> None:
        self.entries: dict[str, CredentialEntry] = dict(entries or {})
        self.foreign: dict[str, CredentialEntry] = dict(foreign or {})
        self._lock = threading.Lock()

    def remove_one(self, host: str) -> None:
        with self._lock:
            if host not in self.entries:
                raise NotLoggedInError(host)
            del self.entries[host]

    def remove_all(self) -> None:
        with self._lock:
            self.entries = {}

    def read_one(self, host: str) -> CredentialEntry | None:
        with self._lock:
            return self.entries.get(host) or self.foreign.get(host)
