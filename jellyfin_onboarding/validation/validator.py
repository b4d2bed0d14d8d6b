"""Connection validator - checks that an address points at a live server.

The validator issues a GET to the candidate address and follows redirects
itself so that the final address can be reported back:
- 3xx with a Location header: follow, up to ``max_redirects`` hops
- 200 with the marker string in the body: valid
- anything else: invalid, with a Diagnostic saying why
"""

import codecs
import logging
from typing import Optional
from urllib.parse import urljoin

import requests

from .diagnostics import DiagnosticKind, ValidationResult
from .uri import normalize_uri

logger = logging.getLogger(__name__)

# Substring a genuine server's web client page contains
SERVER_MARKER = "Jellyfin"

DEFAULT_MAX_REDIRECTS = 10

DEFAULT_REQUEST_TIMEOUT = 10.0

DEFAULT_BODY_ENCODING = "utf-8"

REDIRECT_STATUSES = range(300, 309)


class ConnectionValidator:
    """Validates candidate server addresses over HTTP."""

    def __init__(
        self,
        marker: str = SERVER_MARKER,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize validator.

        Args:
            marker: String the response body must contain.
            max_redirects: Redirect hops to follow before giving up.
            request_timeout: Timeout in seconds for each request.
            session: HTTP session to use. Default: a new requests.Session.
        """
        self.marker = marker
        self.max_redirects = max_redirects
        self.request_timeout = request_timeout
        self._session = session or requests.Session()

    def validate(self, uri_string: str) -> ValidationResult:
        """Check whether ``uri_string`` is a reachable server.

        Args:
            uri_string: Address to check, with or without a scheme.

        Returns:
            ValidationResult. On success ``uri`` holds the address reached
            after following every redirect.
        """
        try:
            url = normalize_uri(uri_string)
        except ValueError as e:
            logger.info("Rejected malformed address %r: %s", uri_string, e)
            return ValidationResult.failure(DiagnosticKind.MALFORMED_URI, detail=str(e))

        redirects = 0
        while True:
            logger.debug("Checking %s", url)
            try:
                response = self._session.get(
                    url,
                    allow_redirects=False,
                    timeout=self.request_timeout,
                )
            except requests.RequestException as e:
                logger.info("Could not reach %s: %s", url, e)
                return ValidationResult.failure(
                    DiagnosticKind.UNREACHABLE, redirects=redirects, detail=str(e)
                )
            except ValueError as e:
                # urllib3 rejects some hosts at connect time without wrapping the error
                logger.info("Could not request %s: %s", url, e)
                return ValidationResult.failure(
                    DiagnosticKind.MALFORMED_URI, redirects=redirects, detail=str(e)
                )

            try:
                status = response.status_code

                if status in REDIRECT_STATUSES:
                    location = (response.headers.get("Location") or "").strip()
                    if not location:
                        logger.info("Redirect from %s has no Location", url)
                        return ValidationResult.failure(
                            DiagnosticKind.INVALID_REDIRECT,
                            redirects=redirects,
                            status_code=status,
                        )

                    if redirects >= self.max_redirects:
                        logger.info("Gave up on %s after %d redirects", uri_string, redirects)
                        return ValidationResult.failure(
                            DiagnosticKind.TOO_MANY_REDIRECTS, redirects=redirects
                        )

                    try:
                        url = normalize_uri(urljoin(url, location))
                    except ValueError as e:
                        logger.info("Redirect from %s to unusable %r", url, location)
                        return ValidationResult.failure(
                            DiagnosticKind.INVALID_REDIRECT,
                            redirects=redirects,
                            status_code=status,
                            detail=str(e),
                        )
                    redirects += 1
                    continue

                if status != 200:
                    logger.info("%s answered with HTTP %d", url, status)
                    return ValidationResult.failure(
                        DiagnosticKind.HTTP_STATUS, redirects=redirects, status_code=status
                    )

                if self.marker not in read_body(response):
                    logger.info("%s does not identify as a server", url)
                    return ValidationResult.failure(
                        DiagnosticKind.NOT_A_SERVER, redirects=redirects
                    )

                logger.info("Validated %s", url)
                return ValidationResult.success(url, redirects=redirects)

            finally:
                response.close()

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def read_body(response: requests.Response) -> str:
    """Decode a response body using its declared charset.

    Falls back to UTF-8 when the Content-Type carries no charset or names
    one Python does not know.
    """
    encoding = None
    if "charset" in response.headers.get("Content-Type", "").lower():
        encoding = response.encoding or requests.utils.get_encoding_from_headers(response.headers)

    try:
        codecs.lookup(encoding or DEFAULT_BODY_ENCODING)
    except LookupError:
        encoding = None
    return response.content.decode(encoding or DEFAULT_BODY_ENCODING, errors="replace")
