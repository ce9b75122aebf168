"""Tests for mDNS scanner discovery."""

import asyncio
import socket
import struct
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from zeroconf import (
    BadTypeInNameException,
    DNSAddress,
    DNSIncoming,
    DNSOutgoing,
    DNSPointer,
    DNSService,
    DNSText,
    NotRunningException,
    RecordUpdate,
)

from escl.discovery import discover, endpoints_from_records, txt_properties
from escl.exceptions import EsclDiscoveryError
from escl.models.device import DeviceEndpoint

# ruff: noqa: PLR2004  # Magic values in tests are expected

# DNS record types and class (RFC 1035, RFC 2782, RFC 3596)
TYPE_A = 1
TYPE_PTR = 12
TYPE_TXT = 16
TYPE_AAAA = 28
TYPE_SRV = 33
CLASS_IN = 1
# QR and AA set
FLAGS_RESPONSE = 0x8400

SERVICE = "_uscan._tcp.local."
INSTANCE = "Brother MFC-L2710DW._uscan._tcp.local."
HOST = "BRW105BAD.local."
TTL = 4500


def txt(*entries: bytes) -> bytes:
    """Encode TXT entries as length-prefixed strings."""
    return b"".join(bytes([len(entry)]) + entry for entry in entries)


def scanner_records(
    instance: str = INSTANCE,
    host: str = HOST,
    address: str = "192.168.1.20",
    port: int = 80,
    properties: bytes = txt(b"txtvers=1", b"ty=Brother MFC-L2710DW", b"rs=eSCL"),
) -> list[Any]:
    """Build the PTR, TXT, SRV and A records announcing one scanner."""
    return [
        DNSPointer(SERVICE, TYPE_PTR, CLASS_IN, TTL, instance),
        DNSText(instance, TYPE_TXT, CLASS_IN, TTL, properties),
        DNSService(instance, TYPE_SRV, CLASS_IN, TTL, 0, 0, port, host),
        DNSAddress(host, TYPE_A, CLASS_IN, TTL, socket.inet_aton(address)),
    ]


HP_ENVY = scanner_records(
    instance="HP Envy._uscan._tcp.local.",
    host="hp-envy.local.",
    address="192.168.1.30",
    port=8080,
    properties=txt(b"ty=HP Envy", b"rs=/eSCL/"),
)


def build_response(records: list[Any]) -> bytes:
    """Encode records as the answers of a single mDNS response."""
    outgoing = DNSOutgoing(FLAGS_RESPONSE, multicast=True)
    for record in records:
        outgoing.add_answer_at_time(record, 0)
    return outgoing.packets()[0]


class FakeZeroconf:
    """Zeroconf instance handing received multicast responses to its listeners."""

    def __init__(self, responses: list[bytes]) -> None:
        self.responses = responses
        self.listeners: list[Any] = []
        self.async_wait_for_start = AsyncMock()

    def async_add_listener(self, listener: Any, question: Any) -> None:
        self.listeners.append(listener)

    def async_remove_listener(self, listener: Any) -> None:
        self.listeners.remove(listener)

    def receive(self) -> None:
        for packet in self.responses:
            incoming = DNSIncoming(packet)
            updates = [RecordUpdate(record, None) for record in incoming.answers()]
            for listener in list(self.listeners):
                listener.async_update_records(self, 0.0, updates)


@contextmanager
def multicast(*responses: bytes) -> Iterator[tuple[MagicMock, MagicMock, MagicMock]]:
    """Patch zeroconf so browsing receives ``responses`` from the network."""
    aiozc = MagicMock()
    aiozc.zeroconf = FakeZeroconf(list(responses))
    aiozc.async_close = AsyncMock()
    browser = MagicMock()
    browser.async_cancel = AsyncMock()

    def start_browser(zeroconf: FakeZeroconf, type_: str, handlers: list) -> MagicMock:
        asyncio.get_running_loop().call_soon(zeroconf.receive)
        return browser

    with (
        patch("escl.discovery.AsyncZeroconf", return_value=aiozc),
        patch(
            "escl.discovery.AsyncServiceBrowser", side_effect=start_browser
        ) as browser_cls,
    ):
        yield aiozc, browser_cls, browser


def test_txt_properties() -> None:
    """Test decoding TXT record properties."""
    data = txt(b"txtvers=1", b"TY=Scanner", b"rs=/eSCL", b"ty=Other", b"duplex", b"")
    record = DNSText(INSTANCE, TYPE_TXT, CLASS_IN, TTL, data)

    assert txt_properties(record) == {
        "txtvers": "1",
        "ty": "Scanner",
        "rs": "/eSCL",
        "duplex": "",
    }


def test_txt_properties_other_service() -> None:
    """Test that a TXT record of another service type is refused."""
    record = DNSText("Printer._ipp._tcp.local.", TYPE_TXT, CLASS_IN, TTL, txt(b"ty=P"))

    with pytest.raises(BadTypeInNameException):
        txt_properties(record)


def test_endpoints_from_complete_records() -> None:
    """Test correlating a complete announcement."""
    endpoints = endpoints_from_records(scanner_records())

    assert endpoints == [
        DeviceEndpoint(
            base_url="http://192.168.1.20:80/eSCL", name="Brother MFC-L2710DW"
        )
    ]


def test_endpoints_ignore_record_order_and_case() -> None:
    """Test that records correlate regardless of their order and name case."""
    records = scanner_records(host="brw105bad.local.")
    records[-1] = DNSAddress(
        HOST, TYPE_A, CLASS_IN, TTL, socket.inet_aton("192.168.1.20")
    )

    endpoints = endpoints_from_records(list(reversed(records)))

    assert [endpoint.base_url for endpoint in endpoints] == [
        "http://192.168.1.20:80/eSCL"
    ]


def test_endpoints_root_path() -> None:
    """Test a scanner serving eSCL at the root of its web server."""
    records = scanner_records(port=8080, properties=txt(b"ty=Scanner", b"rs="))

    assert endpoints_from_records(records) == [
        DeviceEndpoint(base_url="http://192.168.1.20:8080", name="Scanner")
    ]


@pytest.mark.parametrize("missing", [TYPE_TXT, TYPE_SRV, TYPE_A])
def test_endpoints_omit_incomplete_instances(missing: int) -> None:
    """Test that an instance lacking a record is left out."""
    records = [r for r in scanner_records() if r.type != missing]

    assert endpoints_from_records(records) == []


@pytest.mark.parametrize(
    "properties",
    [txt(b"txtvers=1", b"ty=Scanner"), txt(b"txtvers=1", b"rs=eSCL")],
)
def test_endpoints_omit_incomplete_txt(properties: bytes) -> None:
    """Test that a TXT record without rs or ty drops the instance."""
    assert endpoints_from_records(scanner_records(properties=properties)) == []


def test_endpoints_ignore_ipv6_only_hosts() -> None:
    """Test that an AAAA record alone does not complete an instance."""
    records = scanner_records()[:3]
    records.append(
        DNSAddress(
            HOST,
            TYPE_AAAA,
            CLASS_IN,
            TTL,
            socket.inet_pton(socket.AF_INET6, "fe80::1"),
        )
    )

    assert endpoints_from_records(records) == []


def test_endpoints_multiple_scanners_and_duplicates() -> None:
    """Test a batch announcing two scanners, one of them twice."""
    records = scanner_records() + HP_ENVY + [scanner_records()[0]]

    assert endpoints_from_records(records) == [
        DeviceEndpoint(
            base_url="http://192.168.1.20:80/eSCL", name="Brother MFC-L2710DW"
        ),
        DeviceEndpoint(base_url="http://192.168.1.30:8080/eSCL", name="HP Envy"),
    ]


def test_endpoints_ignore_other_services() -> None:
    """Test that pointers for other service types are ignored."""
    records = scanner_records()
    records[0] = DNSPointer("_ipp._tcp.local.", TYPE_PTR, CLASS_IN, TTL, INSTANCE)

    assert endpoints_from_records(records) == []


@pytest.mark.anyio
async def test_discover_multicast_response() -> None:
    """Test discovery from a response received on the multicast group."""
    with multicast(build_response(scanner_records())) as (aiozc, browser_cls, browser):
        endpoints = await discover(timeout=1)

    assert endpoints == [
        DeviceEndpoint(
            base_url="http://192.168.1.20:80/eSCL", name="Brother MFC-L2710DW"
        )
    ]
    assert browser_cls.call_args.args == (aiozc.zeroconf, SERVICE)
    assert aiozc.zeroconf.listeners == []
    browser.async_cancel.assert_awaited_once()
    aiozc.async_close.assert_awaited_once()


@pytest.mark.anyio
async def test_discover_uses_first_scanner_response_only() -> None:
    """Test that unrelated and later responses are not merged into the batch."""
    printer = [
        DNSPointer("_ipp._tcp.local.", TYPE_PTR, CLASS_IN, TTL, "P._ipp._tcp.local.")
    ]
    responses = (
        build_response(printer),
        build_response(scanner_records()),
        build_response(HP_ENVY),
    )

    with multicast(*responses):
        endpoints = await discover(timeout=1)

    assert [endpoint.name for endpoint in endpoints] == ["Brother MFC-L2710DW"]


@pytest.mark.anyio
async def test_discover_ignores_goodbye_packets() -> None:
    """Test that a scanner leaving the network is not reported."""
    goodbye = [DNSPointer(SERVICE, TYPE_PTR, CLASS_IN, 0, INSTANCE)]

    with multicast(build_response(goodbye)):
        assert await discover(timeout=0.05) == []


@pytest.mark.anyio
async def test_discover_empty_response() -> None:
    """Test a response without records."""
    with multicast(struct.pack("!HHHHHH", 0, FLAGS_RESPONSE, 0, 0, 0, 0)):
        assert await discover(timeout=0.05) == []


@pytest.mark.anyio
async def test_discover_timeout() -> None:
    """Test that silence until the timeout yields no scanners."""
    with multicast() as (aiozc, _, browser):
        assert await discover(timeout=0.01) == []

    browser.async_cancel.assert_awaited_once()
    aiozc.async_close.assert_awaited_once()


@pytest.mark.anyio
async def test_discover_logs_formatted_messages() -> None:
    """Test that log messages arrive formatted, as loguru expects."""
    logger = MagicMock()

    with multicast(build_response(scanner_records())):
        await discover(timeout=1, logger=logger)

    calls = logger.debug.call_args_list + logger.info.call_args_list
    assert calls
    assert all(len(call.args) == 1 and not call.kwargs for call in calls)
    assert any("Discovered 1 scanner(s)." in call.args[0] for call in calls)


@pytest.mark.anyio
async def test_discover_listener_not_running() -> None:
    """Test that a listener failing to start fails discovery."""
    with multicast() as (aiozc, browser_cls, _):
        aiozc.zeroconf.async_wait_for_start.side_effect = NotRunningException()

        with pytest.raises(EsclDiscoveryError):
            await discover(timeout=1)

    browser_cls.assert_not_called()
    assert aiozc.zeroconf.listeners == []
    aiozc.async_close.assert_awaited_once()


@pytest.mark.anyio
async def test_discover_socket_unavailable() -> None:
    """Test that failing to open the multicast socket fails discovery."""
    with (
        patch(
            "escl.discovery.AsyncZeroconf",
            side_effect=OSError("Address already in use"),
        ),
        pytest.raises(EsclDiscoveryError),
    ):
        await discover(timeout=1)
