"""
Low-level HTTP fetcher for the PUBG API.

Performs one authenticated GET per call and reduces the outcome to either
the raw body text or one of the typed failures in
``pubglookup.core.exceptions``. Decoding is left to the caller.
"""

import asyncio
from typing import Any

import aiohttp

from pubglookup import __version__
from pubglookup.core.cancellation import CancellationSignal
from pubglookup.core.exceptions import (
    EmptyBodyError,
    HttpError,
    NetworkUnavailableError,
    RequestCancelledError,
    ServerError,
    UnauthorizedError,
)
from pubglookup.core.validation import sanitize_credential, validate_address
from pubglookup.logger import get_logger

logger = get_logger(__name__)


class Fetcher:
    """Async fetcher that owns (or borrows) one long-lived aiohttp session.

    The session is the only shared resource and is reused across calls to
    avoid opening a new connection pool per request. Apart from that the
    fetcher keeps no state between calls, so one instance can serve any
    number of concurrent fetches.
    """

    DEFAULT_ACCEPT = "application/vnd.api+json"

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        accept: str = DEFAULT_ACCEPT,
        timeout: float | None = None,
    ):
        """Initialize the fetcher.

        Args:
            session: Optional aiohttp session. If not provided, one will
                     be created when needed.
            accept: Value of the ``Accept`` header sent with every request.
            timeout: Optional total timeout in seconds. ``None`` waits
                     until the request completes or is cancelled.
        """
        self._session = session
        self._owns_session = session is None
        self.accept = accept
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if we own it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "Fetcher":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def build_headers(self, credential: str) -> dict[str, str]:
        """Build request headers for one call."""
        return {
            "Authorization": f"Bearer {sanitize_credential(credential)}",
            "Accept": self.accept,
            "User-Agent": f"pubglookup/{__version__}",
        }

    async def fetch(
        self,
        address: str,
        credential: str,
        signal: CancellationSignal | None = None,
    ) -> str:
        """Fetch ``address`` and return the body text.

        Args:
            address: Absolute URL to request.
            credential: Bearer token. Surrounding whitespace and CR/LF are
                        stripped before use.
            signal: Optional cancellation signal. Firing it before or during
                    the request aborts the request.

        Returns:
            The response body, unparsed.

        Raises:
            ValidationError: If the address or credential is unusable.
            RequestCancelledError: If ``signal`` fired.
            NetworkUnavailableError: On DNS/connection/transport failures.
            UnauthorizedError: On 401 or 403.
            ServerError: On any 5xx.
            HttpError: On any other non-2xx status.
            EmptyBodyError: On a 2xx with an empty or blank body.
        """
        validate_address(address)
        headers = self.build_headers(credential)

        if signal is None:
            return await self._get(address, headers)

        signal.raise_if_cancelled(address)

        request = asyncio.ensure_future(self._get(address, headers))
        waiter = asyncio.ensure_future(signal.wait())
        try:
            done, _ = await asyncio.wait(
                {request, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            request.cancel()
            await asyncio.shield(asyncio.gather(request, return_exceptions=True))
            raise
        finally:
            waiter.cancel()

        if request in done:
            return request.result()

        # Let the aborted request unwind before reporting
        request.cancel()
        await asyncio.gather(request, return_exceptions=True)
        logger.info("fetch_cancelled", url=address)
        raise RequestCancelledError(address)

    async def _get(self, url: str, headers: dict[str, str]) -> str:
        try:
            async with self.session.get(url, headers=headers) as resp:
                body = await resp.text(errors="replace")
                return self._classify(url, resp.status, resp.reason, body)

        except aiohttp.ClientError as e:
            logger.warning("fetch_network_error", url=url, error=type(e).__name__)
            raise NetworkUnavailableError(url, details=str(e)) from e
        except asyncio.TimeoutError as e:
            # Only reachable when a timeout was configured
            logger.warning("fetch_timeout", url=url)
            raise NetworkUnavailableError(url, details="Request timed out") from e

    @staticmethod
    def _classify(url: str, status: int, reason: str | None, body: str) -> str:
        """Map a completed response to its body or a typed failure."""
        if status in (401, 403):
            logger.warning("fetch_unauthorized", url=url, status=status)
            raise UnauthorizedError(url, status, body)

        if status >= 500:
            logger.warning("fetch_server_error", url=url, status=status)
            raise ServerError(url, status, body)

        if not 200 <= status < 300:
            logger.warning("fetch_http_error", url=url, status=status)
            raise HttpError(url, status, reason, body)

        if not body.strip():
            logger.warning("fetch_empty_body", url=url, status=status)
            raise EmptyBodyError(url, status)

        logger.debug("fetch_ok", url=url, status=status, size=len(body))
        return body
