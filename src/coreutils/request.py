import logging
import time
from typing import Callable, Dict, Optional

import requests
from urllib3.exceptions import InvalidHeader
from urllib3.util.retry import Retry

from src.coreutils.backoff import compute_wait_ms
from src.coreutils.errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20.0  # seconds, per attempt
DEFAULT_MAX_ATTEMPTS = 4
RATE_LIMIT_STATUS = 429

DEFAULT_HEADERS = {
    "User-Agent": "pipe-roblox-games-to-json/1.0",
    "Accept": "application/json",
    # The games API rejects browser origins; "null" passes its origin check
    "Origin": "null",
}

# Only used for its Retry-After parser (delta-seconds or HTTP-date)
_RETRY_AFTER_PARSER = Retry(total=0)


def new_session() -> requests.Session:
    """Create a new requests session with default headers.

    No urllib3 retry adapter is mounted: ResilientFetcher owns the retry loop.
    """
    session = requests.Session()
    session.headers.update(DEFAULT_HEADERS)
    return session


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a Retry-After header into seconds, or None when absent/invalid"""
    if not value:
        return None
    try:
        return max(0.0, float(_RETRY_AFTER_PARSER.parse_retry_after(value)))
    except InvalidHeader:
        return None


class ResilientFetcher:
    """Single GET with per-attempt timeout, retries and rate-limit handling"""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff: Callable[[int], float] = compute_wait_ms,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize the fetcher

        Args:
            session: HTTP session to use (new_session() if not provided)
            timeout: Per-attempt timeout in seconds, handed to requests. It bounds
                the connect and every socket read, not the whole transfer: a
                server trickling bytes can hold one attempt open past it
            max_attempts: Total attempts including the first one
            backoff: attempt -> wait in milliseconds
            sleep: Sleep function taking seconds (time.sleep if not provided)
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

        self.session = session or new_session()
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff = backoff
        self._sleep = sleep or time.sleep

    def _wait(self, seconds: float) -> None:
        if seconds > 0:
            self._sleep(seconds)

    def fetch(
        self, url: str, headers: Optional[Dict[str, str]] = None
    ) -> requests.Response:
        """
        GET a URL, retrying transport failures, HTTP 5xx and HTTP 429.

        Args:
            url: URL to fetch
            headers: Optional extra headers merged over the session defaults

        Returns:
            requests.Response: The first non-retryable response, or the last
            429/5xx response once attempts are exhausted

        Raises:
            TransportError: When every attempt failed at the transport level
        """
        last_error: Optional[requests.RequestException] = None

        for attempt in range(1, self.max_attempts + 1):
            is_last = attempt == self.max_attempts
            start = time.time()

            try:
                response = self.session.get(url, headers=headers, timeout=self.timeout)
            except requests.RequestException as e:
                last_error = e
                if is_last:
                    break
                wait_s = self.backoff(attempt) / 1000
                logger.warning(
                    f"Attempt {attempt}/{self.max_attempts} failed for {url}: {e}; "
                    f"retrying in {wait_s:.2f}s"
                )
                self._wait(wait_s)
                continue

            status = response.status_code

            if status == RATE_LIMIT_STATUS and not is_last:
                retry_after = parse_retry_after(response.headers.get("Retry-After"))
                wait_s = (
                    retry_after
                    if retry_after is not None
                    else self.backoff(attempt) / 1000
                )
                logger.warning(
                    f"Rate limited (429) on attempt {attempt}/{self.max_attempts} "
                    f"for {url}; retrying in {wait_s:.2f}s"
                )
                response.close()
                self._wait(wait_s)
                continue

            if 500 <= status < 600 and not is_last:
                wait_s = self.backoff(attempt) / 1000
                logger.warning(
                    f"Server error {status} on attempt {attempt}/{self.max_attempts} "
                    f"for {url}; retrying in {wait_s:.2f}s"
                )
                response.close()
                self._wait(wait_s)
                continue

            logger.debug(f"Fetched {url} [{status}]: {time.time() - start:.2f} seconds")
            return response

        raise TransportError(url, self.max_attempts, last_error) from last_error
