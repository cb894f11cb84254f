"""Live verification of registry credentials."""

import datetime
import re
import threading
from abc import ABC, abstractmethod

import httpx
import structlog

from ..exceptions import AuthProbeError, ProbeCancelledError
from ..models.registry_host import registry_endpoint

_CHALLENGE_PARAM = re.compile(r'(\w+)="([^"]*)"')


class AuthProbe(ABC):
    """Check whether a username and secret currently authenticate against
    a registry.
    """

    @abstractmethod
    def check(
        self,
        host: str,
        username: str,
        secret: str,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        """Return if authentication succeeds.

        Raises
        ------
        AuthProbeError
            The registry rejected the credentials or could not be asked.
        ProbeCancelledError
            ``cancel`` was set, or the request timed out.
        """
        ...


class HttpAuthProbe(AuthProbe):
    """Probe a registry with the Docker Registry HTTP API V2 handshake.

    ``GET /v2/`` is tried anonymously first.  A ``401`` carries a
    ``WWW-Authenticate`` challenge: for ``Bearer``, a token is requested
    from the realm using basic auth; for ``Basic``, ``/v2/`` is simply
    requested again with basic auth.

    Parameters
    ----------
    timeout
        Deadline for each HTTP request.  Running out of time counts as
        cancellation, not as a rejected credential.
    verify
        Whether to verify the registry's TLS certificate.
    client
        HTTP client to use; mostly for the test suite.
    """

    def __init__(
        self,
        timeout: datetime.timedelta = datetime.timedelta(seconds=30),
        *,
        verify: bool = True,
        client: httpx.Client | None = None,
    ) -> None:
        self._http_client = client or httpx.Client(
            timeout=timeout.total_seconds(), verify=verify
        )
        self._logger = structlog.get_logger(__name__)

    def close(self) -> None:
        self._http_client.close()

    def check(
        self,
        host: str,
        username: str,
        secret: str,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        url = f"https://{registry_endpoint(host)}/v2/"
        auth = httpx.BasicAuth(username, secret)
        r = self._get(url, cancel=cancel)
        if r.status_code == httpx.codes.OK:
            self._logger.debug(f"{host} does not require authentication")
            return
        if r.status_code != httpx.codes.UNAUTHORIZED:
            raise AuthProbeError(
                f"unexpected status {r.status_code} from {url}"
            )
        scheme, params = _parse_challenge(
            r.headers.get("www-authenticate", "")
        )
        match scheme:
            case "bearer":
                realm = params.get("realm")
                if not realm:
                    raise AuthProbeError(
                        f"{url}: bearer challenge has no realm"
                    )
                query = {}
                if "service" in params:
                    query["service"] = params["service"]
                r = self._get(realm, params=query, auth=auth, cancel=cancel)
            case "basic":
                r = self._get(url, auth=auth, cancel=cancel)
            case _:
                raise AuthProbeError(
                    f"{url}: unsupported authentication challenge {scheme!r}"
                )
        if r.status_code != httpx.codes.OK:
            raise AuthProbeError(
                f"authenticating as {username!r} to {host}: "
                f"status {r.status_code}"
            )
        self._logger.debug(f"Authenticated '{username}' to {host}")

    def _get(
        self,
        url: str,
        *,
        params: dict[str, str] | None = None,
        auth: httpx.Auth | None = None,
        cancel: threading.Event | None,
    ) -> httpx.Response:
        if cancel is not None and cancel.is_set():
            raise ProbeCancelledError(f"cancelled before requesting {url}")
        try:
            r = self._http_client.get(url, params=params, auth=auth)
        except httpx.TimeoutException as exc:
            raise ProbeCancelledError(f"timed out requesting {url}") from exc
        except httpx.HTTPError as exc:
            raise AuthProbeError(f"cannot reach {url}: {exc}") from exc
        except (httpx.InvalidURL, ValueError) as exc:
            # The realm URL comes from the registry and may be garbage.
            raise AuthProbeError(f"invalid URL {url!r}: {exc}") from exc
        if cancel is not None and cancel.is_set():
            raise ProbeCancelledError(f"cancelled while requesting {url}")
        return r


def _parse_challenge(header: str) -> tuple[str, dict[str, str]]:
    scheme, _, rest = header.strip().partition(" ")
    return scheme.lower(), dict(_CHALLENGE_PARAM.findall(rest))
