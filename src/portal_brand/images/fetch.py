"""Byte fetching for image references: HTTP(S) URLs, data URIs and local files."""

from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path
from threading import Lock
from urllib.parse import unquote_to_bytes, urlparse

import requests
from requests import Session
from tenacity import (  # type: ignore[import-untyped]
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
MAX_IMAGE_BYTES = 15 * 1024 * 1024
_USER_AGENT = "Mozilla/5.0 (compatible; PortalBrand/1.0; +https://example.invalid/bot)"
_IMAGE_ACCEPT = "image/avif,image/webp,image/svg+xml,image/*,*/*;q=0.8"
_RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


class RetryableHTTPStatusError(Exception):
    """Raised for throttling and server errors worth another attempt."""

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"{url} answered {status_code}")
        self.status_code = status_code


class ImageTooLargeError(Exception):
    pass


def ensure_http_scheme(url: str) -> str:
    """Qualify *url* with an HTTP scheme, defaulting to https."""
    cleaned = url.strip()
    if not cleaned or cleaned.startswith(("http://", "https://")):
        return cleaned
    if cleaned.startswith("//"):
        return f"https:{cleaned}"
    if urlparse(cleaned).scheme:
        return cleaned
    return f"https://{cleaned}"


def decode_data_uri(uri: str) -> bytes | None:
    if not uri.startswith("data:"):
        return None
    try:
        header, data = uri.split(",", 1)
    except ValueError:
        return None
    if ";base64" in header:
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError):
            return None
    return unquote_to_bytes(data)


class ImageFetcher:
    """Downloads image bytes over one pooled session, retrying transient failures."""

    def __init__(self, attempts: int = 3, max_bytes: int = MAX_IMAGE_BYTES) -> None:
        self.max_bytes = max_bytes
        self._lock = Lock()
        self._session: Session | None = None
        self._retryer = Retrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=1, min=1, max=5),
            retry=retry_if_exception_type(
                (requests.Timeout, requests.ConnectionError, RetryableHTTPStatusError)
            ),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            reraise=True,
        )

    @property
    def session(self) -> Session:
        if self._session is None:
            with self._lock:
                if self._session is None:
                    session = requests.Session()
                    session.headers.update({"User-Agent": _USER_AGENT, "Accept": _IMAGE_ACCEPT})
                    self._session = session
        return self._session

    def _get(self, url: str, timeout: float) -> bytes:
        with self.session.get(url, timeout=timeout, allow_redirects=True, stream=True) as response:
            if response.status_code in _RETRY_STATUSES:
                raise RetryableHTTPStatusError(response.status_code, url)
            response.raise_for_status()
            declared = int(response.headers.get("Content-Length") or 0)
            if declared > self.max_bytes:
                raise ImageTooLargeError(f"{url} declares {declared} bytes")
            chunks = []
            received = 0
            for chunk in response.iter_content(chunk_size=64 * 1024):
                received += len(chunk)
                if received > self.max_bytes:
                    raise ImageTooLargeError(f"{url} exceeds {self.max_bytes} bytes")
                chunks.append(chunk)
            return b"".join(chunks)

    def __call__(self, url: str, timeout: float = DEFAULT_TIMEOUT) -> bytes | None:
        """Return the body of *url*, or ``None`` once retries are exhausted.

        Failures are logged and reported as a missing image; they never
        propagate to the scoring code.
        """
        target = ensure_http_scheme(url)
        if not target:
            return None
        try:
            return self._retryer(lambda: self._get(target, timeout))
        except RetryableHTTPStatusError as exc:
            logger.warning("Giving up on %s: %s", target, exc)
        except ImageTooLargeError as exc:
            logger.warning("Skipping oversized image: %s", exc)
        except requests.RequestException as exc:
            logger.warning("Request error fetching %s: %s", target, exc)
        return None


_default_fetcher = ImageFetcher()


def fetch_image_bytes(url: str, timeout: float = DEFAULT_TIMEOUT) -> bytes | None:
    return _default_fetcher(url, timeout)


def load_bytes(ref: str | None, timeout: float = DEFAULT_TIMEOUT) -> bytes | None:
    """Resolve any supported image reference to raw bytes."""
    if not ref:
        return None
    ref = ref.strip()
    if ref.startswith("data:"):
        return decode_data_uri(ref)
    if ref.startswith("file://"):
        ref = urlparse(ref).path
    is_local = ref.startswith(("/", "./", "../")) and not ref.startswith("//")
    if is_local or ("://" not in ref and Path(ref).suffix and Path(ref).is_file()):
        path = Path(ref)
        if not path.is_file():
            logger.debug("Local image %s does not exist", path)
            return None
        return path.read_bytes()
    return fetch_image_bytes(ref, timeout=timeout)
