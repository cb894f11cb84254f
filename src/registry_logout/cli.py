"""CLI for registry logout."""

import argparse
import signal
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from types import FrameType

from .config import LogoutConfig
from .exceptions import (
    InvalidRequestError,
    LogoutFailedError,
    ProbeCancelledError,
)
from .factory import Factory
from .models.outcome import LogoutOutcome, OutcomeKind
from .models.request import LogoutRequest
from .services.logout import execute

PROG = "registry-logout"
EXIT_FAILURE = 125


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Remove the cached username and password for a registry.",
        epilog=(
            "examples:\n"
            f"  {PROG} docker.io\n"
            f"  {PROG} --authfile authdir/myauths.json docker.io\n"
            f"  {PROG} --all"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "registry",
        nargs="*",
        help="registry to log out of",
    )
    parser.add_argument(
        "-a",
        "--all",
        action="store_true",
        help=(
            "Remove the cached credentials for all registries in the auth"
            " file"
        ),
        default=False,
    )
    parser.add_argument(
        "--authfile",
        type=Path,
        help=(
            "Path of the authentication file.  Default is"
            " ${XDG_RUNTIME_DIR}/containers/auth.json; use the"
            " REGISTRY_AUTH_FILE environment variable to override"
        ),
        default=None,
    )
    parser.add_argument(
        "-c",
        "--config-file",
        type=Path,
        help="logout config file",
        default=None,
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
        default=False,
    )
    parser.add_argument(
        "--tls-verify",
        action=argparse.BooleanOptionalAction,
        help=(
            "Verify registry TLS certificates when checking credentials"
            " (requests always use HTTPS)"
        ),
        default=None,
    )
    result = parser.parse_args(argv)
    if len(result.registry) > 1:
        parser.error("too many arguments, logout takes at most 1 argument")
    if result.all and result.registry:
        parser.error("--all takes no registry argument")
    if not result.all and not result.registry:
        parser.error("registry must be given")
    return result


def _load_config(args: argparse.Namespace) -> LogoutConfig:
    if args.config_file:
        cfg = LogoutConfig.from_file(args.config_file)
    else:
        cfg = LogoutConfig()

    # Override settings in config with anything given on the command line
    if args.authfile:
        cfg.auth_file = args.authfile
    if args.debug:
        cfg.debug = True
    if args.tls_verify is not None:
        cfg.tls_verify = args.tls_verify
    return cfg


def render(outcome: LogoutOutcome) -> str:
    """Turn an outcome into the message shown to the user."""
    match outcome.kind:
        case OutcomeKind.REMOVED_ONE:
            return f"Removed login credentials for {outcome.host}"
        case OutcomeKind.REMOVED_ALL:
            return "Removed login credentials for all registries"
        case OutcomeKind.NOT_LOGGED_IN:
            return f"Not logged into {outcome.host}"
        case OutcomeKind.FOREIGN_LOGIN:
            where = f" (found in {outcome.source})" if outcome.source else ""
            return (
                f"Not logged into {outcome.host} with {PROG}. Existing"
                f" credentials were established via docker login{where}."
                " Please use docker logout instead."
            )
        case OutcomeKind.FAILURE:
            return f"Error: {outcome.cause}"


def exit_code(outcome: LogoutOutcome) -> int:
    return EXIT_FAILURE if outcome.is_failure else 0


@contextmanager
def _cancel_on_interrupt(cancel: threading.Event) -> Iterator[None]:
    """Turn the first SIGINT into cancellation of the credential check.

    A second SIGINT raises `KeyboardInterrupt` as usual.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def handler(signum: int, frame: FrameType | None) -> None:
        cancel.set()
        signal.signal(signal.SIGINT, signal.default_int_handler)

    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def main(argv: list[str] | None = None) -> int:
    """Log out of a container registry."""
    args = _parse_args(argv)
    cfg = _load_config(args)

    try:
        if args.all:
            request = LogoutRequest.all_registries()
        else:
            request = LogoutRequest.single(args.registry[0])
    except InvalidRequestError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    host = request.host or ""
    cancel = threading.Event()
    try:
        with Factory.standalone(cfg) as factory, _cancel_on_interrupt(cancel):
            outcome = execute(
                request,
                factory.create_credential_store(),
                factory.create_auth_probe(),
                cancel=cancel,
            )
    except InvalidRequestError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        interrupted = ProbeCancelledError("interrupted")
        outcome = LogoutOutcome.failure(
            host, LogoutFailedError("logging out of", host, interrupted)
        )

    if outcome.is_failure:
        print(render(outcome), file=sys.stderr)
    else:
        print(render(outcome))
    return exit_code(outcome)
