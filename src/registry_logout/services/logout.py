"""Decide what logging out of a registry actually means."""

import threading

import structlog
from structlog.stdlib import BoundLogger

from ..exceptions import (
    AuthProbeError,
    LogoutFailedError,
    NotLoggedInError,
    ProbeCancelledError,
    RegistryLogoutError,
)
from ..models.outcome import LogoutOutcome
from ..models.request import LogoutRequest, LogoutScope
from ..storage.probe import AuthProbe
from ..storage.store import CredentialStore


def execute(
    request: LogoutRequest,
    store: CredentialStore,
    probe: AuthProbe,
    *,
    cancel: threading.Event | None = None,
) -> LogoutOutcome:
    """Remove saved credentials for one registry, or for all of them.

    Finding nothing to remove for a single registry is ambiguous: the user
    may never have logged in, or may have logged in with some other tool
    whose credential this store will not remove.  In that case any entry
    still visible through the store is checked against the registry, and a
    live one is reported as a foreign login.  Removing all registries never
    probes.

    Parameters
    ----------
    request
        What to log out of.
    store
        Saved credentials.
    probe
        Live credential check, consulted only to disambiguate.
    cancel
        Set by the caller to abandon a running probe.

    Returns
    -------
    LogoutOutcome
        Store and probe errors come back as a ``FAILURE`` outcome, never as
        ``NOT_LOGGED_IN``.

    Raises
    ------
    InvalidRequestError
        The request is malformed; the store has not been touched.
    """
    request.validate()
    logger = structlog.get_logger(__name__)

    if request.scope == LogoutScope.ALL:
        try:
            store.remove_all()
        except RegistryLogoutError as exc:
            logger.error("Cannot remove credentials", error=str(exc))
            cause = LogoutFailedError(
                "removing credentials for all registries", "", exc
            )
            return LogoutOutcome.failure("", cause)
        logger.info("Removed credentials for all registries")
        return LogoutOutcome.removed_all()

    host = request.host or ""
    logger = logger.bind(host=host)
    try:
        store.remove_one(host)
    except NotLoggedInError:
        return _disambiguate(host, store, probe, cancel, logger)
    except RegistryLogoutError as exc:
        logger.error("Cannot remove credentials", error=str(exc))
        return LogoutOutcome.failure(
            host, LogoutFailedError("logging out of", host, exc)
        )
    logger.info("Removed credentials")
    return LogoutOutcome.removed_one(host)


def _disambiguate(
    host: str,
    store: CredentialStore,
    probe: AuthProbe,
    cancel: threading.Event | None,
    logger: BoundLogger,
) -> LogoutOutcome:
    try:
        entry = store.read_one(host)
    except RegistryLogoutError as exc:
        logger.error("Cannot read auth file", error=str(exc))
        return LogoutOutcome.failure(
            host, LogoutFailedError("reading auth file for", host, exc)
        )
    if entry is None or not entry.complete:
        logger.info("Not logged in")
        return LogoutOutcome.not_logged_in(host)

    logger.debug(f"Checking whether '{entry.username}' is still valid")
    live = True
    try:
        probe.check(
            host,
            entry.username,
            entry.secret.get_secret_value(),
            cancel=cancel,
        )
    except ProbeCancelledError as exc:
        return _cancelled(host, exc, logger)
    except AuthProbeError as exc:
        logger.debug("Saved credential does not authenticate", error=str(exc))
        live = False
    # A verdict reached after cancellation is not trusted either way
    if cancel is not None and cancel.is_set():
        cancelled = ProbeCancelledError(f"cancelled while checking {host}")
        return _cancelled(host, cancelled, logger)
    if not live:
        return LogoutOutcome.not_logged_in(host)
    logger.info(
        "Live credentials held outside this store", source=str(entry.source)
    )
    return LogoutOutcome.foreign_login(host, entry.source)


def _cancelled(
    host: str, exc: ProbeCancelledError, logger: BoundLogger
) -> LogoutOutcome:
    logger.error("Credential check cancelled", error=str(exc))
    return LogoutOutcome.failure(
        host, LogoutFailedError("checking credentials for", host, exc)
    )
