"""
eSCL scanner discovery over multicast DNS.

zeroconf joins the mDNS multicast group and browses for ``_uscan._tcp.local.``.
The first response carrying a pointer for that service is the answer batch;
its records are correlated into device endpoints:

    PTR  _uscan._tcp.local.  -> instance
    TXT  instance            -> rs (path prefix), ty (name)
    SRV  instance            -> port, host
    A    host                -> IPv4 address

An instance missing any of these records is left out of the result.
"""

from __future__ import annotations

import asyncio
import socket
from typing import TYPE_CHECKING, Any

from zeroconf import (
    BadTypeInNameException,
    DNSAddress,
    DNSPointer,
    DNSRecord,
    DNSService,
    DNSText,
    IPVersion,
    RecordUpdateListener,
    ServiceInfo,
)
from zeroconf import Error as ZeroconfError
from zeroconf.asyncio import AsyncServiceBrowser, AsyncZeroconf

from escl.const import (
    DISCOVERY_SERVICE_TYPE,
    DISCOVERY_TIMEOUT,
    LOGGER,
    TXT_NAME,
    TXT_RESOURCE_PATH,
)
from escl.exceptions import EsclDiscoveryError
from escl.models.device import DeviceEndpoint

if TYPE_CHECKING:
    from zeroconf import RecordUpdate, ServiceStateChange, Zeroconf


class FirstBatchListener(RecordUpdateListener):
    """
    Record listener keeping the first answer batch for a service type.

    zeroconf hands over the records of each incoming response together.
    ``batch`` resolves to the records of the first response that points at
    ``service_type``; later responses are ignored.
    """

    def __init__(
        self, service_type: str = DISCOVERY_SERVICE_TYPE, logger: Any = LOGGER
    ) -> None:
        """Initialize the listener."""
        super().__init__()
        self.service_type = service_type.lower()
        self.logger = logger
        self.batch: asyncio.Future[list[DNSRecord]] = (
            asyncio.get_running_loop().create_future()
        )

    def async_update_records(
        self, zc: Zeroconf, now: float, records: list[RecordUpdate]
    ) -> None:
        """Take the first response announcing the service as the batch."""
        if self.batch.done():
            return
        batch = [update.new for update in records if update.new.ttl > 0]
        if not any(
            isinstance(record, DNSPointer) and record.name.lower() == self.service_type
            for record in batch
        ):
            return
        msg = f"mDNS response for {self.service_type} with {len(batch)} records"
        self.logger.debug(msg)
        self.batch.set_result(batch)


def txt_properties(
    record: DNSText, service_type: str = DISCOVERY_SERVICE_TYPE
) -> dict[str, str]:
    """
    Return the properties of a service TXT record.

    Keys are lowercased. A key without a value maps to an empty string, and
    the first occurrence of a key wins.

    Raises:
        BadTypeInNameException: The record is not named after an instance of
            ``service_type``.

    """
    info = ServiceInfo(service_type, record.name, properties=record.text)
    properties: dict[str, str] = {}
    for key, value in info.decoded_properties.items():
        if key:
            properties.setdefault(key.lower(), value or "")
    return properties


def endpoints_from_records(
    records: list[DNSRecord],
    service_type: str = DISCOVERY_SERVICE_TYPE,
    logger: Any = LOGGER,
) -> list[DeviceEndpoint]:
    """
    Correlate the records of one answer batch into device endpoints.

    Arguments:
        records: The records of the batch, from any section of the response.
        service_type: The service the pointer records must be under.
        logger: The logger to use.

    Returns:
        One endpoint per announced instance whose TXT, SRV and A records are
        all present, in the order of their pointer records.

    """
    texts: dict[str, DNSText] = {}
    services: dict[str, DNSService] = {}
    addresses: dict[str, DNSAddress] = {}
    pointers: list[DNSPointer] = []
    for record in records:
        name = record.name.lower()
        if isinstance(record, DNSPointer):
            if name == service_type.lower():
                pointers.append(record)
        elif isinstance(record, DNSText):
            texts.setdefault(name, record)
        elif isinstance(record, DNSService):
            services.setdefault(name, record)
        elif isinstance(record, DNSAddress) and len(record.address) == 4:  # noqa: PLR2004
            addresses.setdefault(name, record)

    endpoints: list[DeviceEndpoint] = []
    seen: set[str] = set()
    for pointer in pointers:
        instance = pointer.alias.lower()
        if instance in seen:
            continue
        seen.add(instance)

        text = texts.get(instance)
        if text is None:
            msg = f"No TXT record for {pointer.alias}"
            logger.debug(msg)
            continue
        try:
            properties = txt_properties(text, service_type)
        except BadTypeInNameException:
            msg = f"TXT record {text.name} is not a {service_type} instance"
            logger.debug(msg)
            continue
        if TXT_RESOURCE_PATH not in properties or TXT_NAME not in properties:
            msg = f"Incomplete TXT record for {pointer.alias}: {properties}"
            logger.debug(msg)
            continue

        service = services.get(instance)
        if service is None:
            msg = f"No SRV record for {pointer.alias}"
            logger.debug(msg)
            continue

        address = addresses.get(service.server.lower())
        if address is None:
            msg = f"No A record for {pointer.alias} ({service.server})"
            logger.debug(msg)
            continue

        base_url = f"http://{socket.inet_ntoa(address.address)}:{service.port}"
        path = properties[TXT_RESOURCE_PATH].strip("/")
        if path:
            base_url = f"{base_url}/{path}"
        endpoints.append(DeviceEndpoint(base_url=base_url, name=properties[TXT_NAME]))

    return endpoints


async def discover(
    timeout: float = DISCOVERY_TIMEOUT,
    logger: Any = LOGGER,
) -> list[DeviceEndpoint]:
    """
    Discover eSCL scanners on the local network.

    Arguments:
        timeout: Seconds to wait for an answer.
        logger: The logger to use.

    Returns:
        The scanners found in the first answer batch, or an empty list if
        nothing answered before the timeout.

    Raises:
        EsclDiscoveryError: The multicast listener could not be started.

    """

    def log_state_change(
        zeroconf: Zeroconf,
        service_type: str,
        name: str,
        state_change: ServiceStateChange,
    ) -> None:
        msg = f"{service_type} {name}: {state_change.name}"
        logger.debug(msg)

    try:
        aiozc = AsyncZeroconf(ip_version=IPVersion.V4Only)
    except OSError as err:
        msg = f"Unable to open discovery socket: {err}"
        raise EsclDiscoveryError(msg) from err

    msg = f"Discovering {DISCOVERY_SERVICE_TYPE} (timeout: {timeout}s)..."
    logger.info(msg)
    listener = FirstBatchListener(DISCOVERY_SERVICE_TYPE, logger)
    browser: AsyncServiceBrowser | None = None
    aiozc.zeroconf.async_add_listener(listener, None)
    try:
        await aiozc.zeroconf.async_wait_for_start()
        browser = AsyncServiceBrowser(
            aiozc.zeroconf, DISCOVERY_SERVICE_TYPE, handlers=[log_state_change]
        )
        try:
            records = await asyncio.wait_for(listener.batch, timeout)
        except asyncio.TimeoutError:
            msg = f"No mDNS response within {timeout}s"
            logger.debug(msg)
            return []
    except ZeroconfError as err:
        msg = f"Discovery listener failed: {err}"
        raise EsclDiscoveryError(msg) from err
    finally:
        if browser is not None:
            await browser.async_cancel()
        aiozc.zeroconf.async_remove_listener(listener)
        await aiozc.async_close()

    endpoints = endpoints_from_records(records, logger=logger)
    msg = f"Discovered {len(endpoints)} scanner(s)."
    logger.info(msg)
    return endpoints
