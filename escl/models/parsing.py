"""
Helpers for decoding eSCL XML documents.

Documents are parsed with xmltodict with namespace processing enabled, so the
scan and pwg namespaces always appear under the ``scan:`` and ``pwg:``
prefixes regardless of the prefixes the scanner declared. Vendors disagree on
which namespace some elements live in, so lookups accept either prefix.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar
from xml.parsers.expat import ExpatError

import xmltodict

from escl.const import NAMESPACE_PREFIXES
from escl.exceptions import EsclDecodeError

T = TypeVar("T")

_PREFIXES = ("scan:", "pwg:", "")


def decode_document(
    document: str | bytes, root: str, factory: Callable[[dict[str, Any]], T]
) -> T:
    """
    Parse an XML document and build a model from its root element.

    Arguments:
        document: The raw XML text received from the scanner.
        root: The local name of the expected root element.
        factory: Builds the model from the root element's mapping.

    Returns:
        Whatever ``factory`` returns.

    Raises:
        EsclDecodeError: The document is not well formed, has a different
            root element, or does not match the expected schema.

    """
    try:
        parsed = xmltodict.parse(
            document,
            process_namespaces=True,
            namespaces=NAMESPACE_PREFIXES,
        )
    except ExpatError as err:
        raise EsclDecodeError(str(err), document) from err

    found = next(iter(parsed), None)
    if found is None or local_name(found) != root:
        msg = f"expected root element {root}, found {found}"
        raise EsclDecodeError(msg, document)

    node = parsed[found]
    try:
        return factory(node if isinstance(node, dict) else {})
    except (TypeError, ValueError) as err:
        raise EsclDecodeError(str(err), document) from err


def local_name(key: str) -> str:
    """Return an element name without its namespace prefix."""
    return key.rsplit(":", 1)[-1]


def child(node: Any, name: str) -> Any:
    """Return the child element ``name`` of ``node`` under any known prefix."""
    if not isinstance(node, dict):
        return None
    for prefix in _PREFIXES:
        key = f"{prefix}{name}"
        if key in node:
            return node[key]
    return None


def as_list(value: Any) -> list[Any]:
    """
    Normalize an element that may appear once or repeatedly.

    xmltodict yields a scalar for a single occurrence and a list for repeated
    occurrences; both become a list in document order.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def text(value: Any) -> str | None:
    """Return the text content of an element, or None if it is empty."""
    if isinstance(value, list):
        msg = f"expected a single element, found {len(value)}"
        raise ValueError(msg)
    if isinstance(value, dict):
        value = value.get("#text")
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def child_text(node: Any, name: str) -> str | None:
    """Return the text of the child element ``name``."""
    value = child(node, name)
    if isinstance(value, list):
        msg = f"element {name}: expected one occurrence, found {len(value)}"
        raise ValueError(msg)
    return text(value)


def required_text(node: Any, name: str) -> str:
    """Return the text of the child element ``name``, which must be present."""
    value = child_text(node, name)
    if value is None:
        msg = f"missing required element {name}"
        raise ValueError(msg)
    return value


def child_int(node: Any, name: str) -> int | None:
    """Return the child element ``name`` as an integer."""
    value = child_text(node, name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as err:
        msg = f"element {name}: expected an integer, got {value!r}"
        raise ValueError(msg) from err


def child_bool(node: Any, name: str) -> bool | None:
    """Return the child element ``name`` as an xsd:boolean."""
    value = child_text(node, name)
    if value is None:
        return None
    if value in ("true", "1"):
        return True
    if value in ("false", "0"):
        return False
    msg = f"element {name}: expected a boolean, got {value!r}"
    raise ValueError(msg)


def child_texts(node: Any, name: str) -> list[str]:
    """Return the text of every occurrence of the child element ``name``."""
    return [value for value in map(text, as_list(child(node, name))) if value]
