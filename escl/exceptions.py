"""Custom exceptions for the eSCL client."""

from __future__ import annotations


class EsclError(Exception):
    """Base class for other exceptions"""

    pass


class EsclConfigurationError(EsclError):
    """Exception raised when a client or scan request is misconfigured."""


class EsclTransportError(EsclError):
    """Exception raised when the HTTP exchange with the scanner fails."""


class EsclDecodeError(EsclError):
    """
    Exception raised when a scanner document cannot be decoded.

    Attributes:
        detail: The underlying parser or schema message.
        document: The offending document text.

    """

    def __init__(self, detail: str, document: str | bytes | None = None) -> None:
        """Initialize the decode error with the parser message and document."""
        super().__init__(f"Unable to decode scanner document: {detail}")
        self.detail = detail
        self.document = document


class EsclUnexpectedStatusError(EsclError):
    """Exception raised when the scanner answers with a status outside the protocol."""

    def __init__(self, status: int, url: str) -> None:
        """Initialize the error with the observed HTTP status and request URL."""
        super().__init__(f"Unexpected HTTP status {status} from {url}")
        self.status = status
        self.url = url


class EsclMissingLocationError(EsclError):
    """
    Exception raised when a created scan job has no usable Location header.

    The job may exist on the scanner, but the client has no way to address it.
    """

    def __init__(self, status: int, location: str | None) -> None:
        """Initialize the error with the response status and raw header value."""
        super().__init__(
            f"Scan job created (HTTP {status}) without a usable Location header: "
            f"{location!r}"
        )
        self.status = status
        self.location = location


class EsclDiscoveryError(EsclError):
    """Exception raised when the discovery channel itself fails."""
