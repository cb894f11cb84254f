"""Component factory."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Self

import structlog
from structlog.stdlib import BoundLogger

from .config import LogoutConfig
from .storage.authfile import AuthFileCredentialStore
from .storage.probe import HttpAuthProbe


def configure_logging(*, debug: bool) -> None:
    """Set the structlog level from the debug flag.

    Log messages go to standard error, leaving standard output for the
    result of the logout.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


class Factory:
    """Build logout components.

    Parameters
    ----------
    config
        Logout configuration.
    logger
        Logger to use for messages.
    """

    @classmethod
    @contextmanager
    def standalone(cls, config: LogoutConfig) -> Iterator[Self]:
        """Context manager for logout components.

        Parameters
        ----------
        config
            Logout configuration.

        Yields
        ------
        Factory
            Newly-created factory.  The HTTP client of any probe it built is
            closed on exit.
        """
        configure_logging(debug=config.debug)
        logger = structlog.get_logger(__name__)
        factory = cls(config, logger)
        try:
            yield factory
        finally:
            factory.close()

    def __init__(self, config: LogoutConfig, logger: BoundLogger) -> None:
        self._config = config
        self._logger = logger
        self._probe: HttpAuthProbe | None = None

    def create_credential_store(self) -> AuthFileCredentialStore:
        auth_file = self._config.resolved_auth_file()
        self._logger.debug(f"Using auth file {auth_file}")
        return AuthFileCredentialStore(
            auth_file, foreign_files=self._config.foreign_auth_files
        )

    def create_auth_probe(self) -> HttpAuthProbe:
        if self._probe is None:
            self._probe = HttpAuthProbe(
                self._config.probe_timeout, verify=self._config.tls_verify
            )
        return self._probe

    def close(self) -> None:
        if self._probe is not None:
            self._probe.close()
            self._probe = None
