"""
eSCL client.

Talks to a scanner over HTTP using the eSCL protocol (Mopria / AirScan).
Every operation is a single request; nothing is cached between calls.
"""

from __future__ import annotations

import asyncio
from http import HTTPStatus
from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin, urlparse

import aiohttp
from aiohttp import hdrs

from escl.const import (
    CAPABILITIES_PATH,
    LOGGER,
    NEXT_DOCUMENT_PATH,
    SCAN_JOBS_PATH,
    SETTINGS_CONTENT_TYPE,
    STATUS_PATH,
)
from escl.exceptions import (
    EsclConfigurationError,
    EsclMissingLocationError,
    EsclTransportError,
    EsclUnexpectedStatusError,
)
from escl.models.capabilities import Capabilities
from escl.models.status import ScannerStatus

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from escl.models.device import DeviceEndpoint
    from escl.models.settings import ScanSettings

_SCHEMES = ("http", "https")


def _is_absolute_http_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in _SCHEMES and bool(parsed.netloc)


def resolve_location(request_url: str, location: str | None) -> str | None:
    """
    Resolve the Location header of a created job against the request URL.

    Returns:
        The absolute job URL without a trailing slash, or None if the header
        is missing, empty or not a usable HTTP URL.

    """
    if location is None or not location.strip():
        return None
    try:
        job_url = urljoin(request_url, location.strip())
    except ValueError:
        return None
    if not _is_absolute_http_url(job_url):
        return None
    return job_url.rstrip("/")


class ScanJob:
    """
    Handle to a scan job on the scanner.

    Pages are pulled one at a time with ``async_next_document``. The scanner
    answers 404 once no page is left, after which the job is exhausted.
    """

    def __init__(
        self,
        job_url: str,
        session: aiohttp.ClientSession,
        logger: Any = LOGGER,
    ) -> None:
        """
        Initialize a ScanJob.

        Arguments:
            job_url: The absolute URL of the job resource.
            session: The aiohttp client session.
            logger: The logger to use.

        """
        self._job_url = job_url
        self._session = session
        self.logger = logger
        self._exhausted = False

    @property
    def job_url(self) -> str:
        """Return the absolute URL of the job resource."""
        return self._job_url

    @property
    def exhausted(self) -> bool:
        """Return true once the scanner has reported there are no more pages."""
        return self._exhausted

    async def async_next_document(self) -> bytes | None:
        """
        Retrieve the next scanned page.

        Returns:
            The page image as returned by the scanner, or None if the job has
            no further pages. Calling again after None issues a new request and
            returns None again.

        Raises:
            EsclTransportError: The HTTP request failed.
            EsclUnexpectedStatusError: The scanner answered other than 200 or 404.

        """
        url = f"{self._job_url}/{NEXT_DOCUMENT_PATH}"
        msg = f"GET {url}"
        self.logger.debug(msg)
        try:
            async with self._session.get(url, raise_for_status=False) as response:
                if response.status == HTTPStatus.NOT_FOUND:
                    msg = f"No more documents for job {self._job_url}"
                    self.logger.debug(msg)
                    self._exhausted = True
                    return None
                if response.status != HTTPStatus.OK:
                    raise EsclUnexpectedStatusError(response.status, url)
                document = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            msg = f"Error retrieving document from {url}: {err}"
            raise EsclTransportError(msg) from err

        msg = f"Received document of {len(document)} bytes for job {self._job_url}"
        self.logger.debug(msg)
        return document

    async def documents(self) -> AsyncIterator[bytes]:
        """Yield every remaining page until the job is exhausted."""
        while (document := await self.async_next_document()) is not None:
            yield document

    def __repr__(self) -> str:
        """Return string representation of the job."""
        return f"ScanJob(job_url={self._job_url!r}, exhausted={self._exhausted})"


class EsclClient:
    """
    Client for an eSCL scanner.

    The base URL must include the eSCL path prefix of the scanner. If the
    full status URL is ``http://192.168.1.20/eSCL/ScannerStatus``, the base
    URL is ``http://192.168.1.20/eSCL``.
    """

    def __init__(
        self,
        base_url: str,
        session: aiohttp.ClientSession,
        logger: Any = LOGGER,
    ) -> None:
        """
        Initialize an EsclClient.

        Arguments:
            base_url: The eSCL base URL of the scanner.
            session: The aiohttp client session. Its timeout applies to every
                request made by the client.
            logger: The logger to use.

        """
        if not _is_absolute_http_url(base_url):
            msg = f"Invalid scanner base URL: {base_url!r}"
            raise EsclConfigurationError(msg)
        self._base_url: str = base_url.rstrip("/")
        self._session: aiohttp.ClientSession = session
        self.logger = logger

    @classmethod
    def from_endpoint(
        cls,
        endpoint: DeviceEndpoint,
        session: aiohttp.ClientSession,
        logger: Any = LOGGER,
    ) -> EsclClient:
        """Create a client for a discovered scanner."""
        return cls(endpoint.base_url, session, logger)

    @property
    def base_url(self) -> str:
        """Return the eSCL base URL of the scanner."""
        return self._base_url

    def _url(self, path: str) -> str:
        return f"{self._base_url}/{path}"

    async def _get_document(self, url: str) -> bytes:
        msg = f"GET {url}"
        self.logger.debug(msg)
        try:
            async with self._session.get(url, raise_for_status=False) as response:
                if response.status != HTTPStatus.OK:
                    raise EsclUnexpectedStatusError(response.status, url)
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            msg = f"Error fetching {url}: {err}"
            raise EsclTransportError(msg) from err

    async def async_get_capabilities(self) -> Capabilities:
        """
        Fetch the capabilities of the scanner.

        Raises:
            EsclTransportError: The HTTP request failed.
            EsclUnexpectedStatusError: The scanner did not answer 200.
            EsclDecodeError: The document could not be decoded.

        """
        document = await self._get_document(self._url(CAPABILITIES_PATH))
        return Capabilities.from_xml(document)

    async def async_get_status(self) -> ScannerStatus:
        """
        Fetch the current status of the scanner.

        Raises:
            EsclTransportError: The HTTP request failed.
            EsclUnexpectedStatusError: The scanner did not answer 200.
            EsclDecodeError: The document could not be decoded.

        """
        document = await self._get_document(self._url(STATUS_PATH))
        return ScannerStatus.from_xml(document)

    async def async_scan(self, settings: ScanSettings) -> ScanJob:
        """
        Submit a scan job.

        Arguments:
            settings: The settings of the scan.

        Returns:
            A handle to the created job.

        Raises:
            EsclTransportError: The HTTP request failed.
            EsclUnexpectedStatusError: The scanner did not answer 201.
            EsclMissingLocationError: The scanner answered 201 without a
                usable Location header.

        """
        url = self._url(SCAN_JOBS_PATH)
        body = settings.to_xml()
        msg = f"POST {url}\n{body}"
        self.logger.debug(msg)
        try:
            async with self._session.post(
                url,
                data=body.encode("utf-8"),
                headers={hdrs.CONTENT_TYPE: SETTINGS_CONTENT_TYPE},
                raise_for_status=False,
            ) as response:
                status = response.status
                location = response.headers.get(hdrs.LOCATION)
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            msg = f"Error creating scan job at {url}: {err}"
            raise EsclTransportError(msg) from err

        if status != HTTPStatus.CREATED:
            raise EsclUnexpectedStatusError(status, url)

        job_url = resolve_location(url, location)
        if job_url is None:
            msg = (
                f"Scanner at {self._base_url} created a job without a usable "
                f"Location header: {location!r}"
            )
            self.logger.warning(msg)
            raise EsclMissingLocationError(status, location)

        msg = f"Created scan job {job_url}"
        self.logger.info(msg)
        return ScanJob(job_url, self._session, self.logger)

    def job(self, job_url: str) -> ScanJob:
        """Return a handle for a job URL obtained earlier."""
        return ScanJob(job_url.rstrip("/"), self._session, self.logger)
