"""Attribute access and typed parsing for XMI elements.

Attribute lookup never raises: a missing key yields `None`. The typed
parse functions return a `Parsed` outcome carrying either a value or an
error message, so each builder can decide per field whether absence or a
bad value is fatal to the element.
"""

import re
from typing import Any, Callable, NamedTuple
from xml.etree.ElementTree import Element

XMI_NAMESPACE = "http://www.omg.org/XMI"

_PREFIXES = {"xmi": XMI_NAMESPACE}

# optional sign and ASCII digits, nothing else
_INTEGER = re.compile(r"[+-]?[0-9]+")

_TRUE = {"true", "1"}
_FALSE = {"false", "0"}


class Parsed(NamedTuple):
    """Outcome of parsing one attribute value.

    `value` is `None` both when the attribute is absent and when it failed
    to parse; `error` is set only in the second case.
    """

    value: Any
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def split_tag(tag: str) -> tuple[str, str]:
    """Split an ElementTree `{uri}local` tag into `(uri, local)`.

    Tags without a namespace return an empty uri.
    """
    if tag.startswith("{"):
        uri, _, local = tag[1:].partition("}")
        return uri, local
    return "", tag


def qualify(key: str) -> str:
    """Expand a prefixed attribute name such as `xmi:id` to Clark notation."""
    prefix, sep, local = key.partition(":")
    if sep and prefix in _PREFIXES:
        return f"{{{_PREFIXES[prefix]}}}{local}"
    return key


def get_attribute(element: Element, key: str) -> str | None:
    """Return the raw attribute value, or `None` if the element lacks it."""
    return element.get(qualify(key))


def _parse_with(raw: str | None, convert: Callable[[str], Any], kind: str) -> Parsed:
    if raw is None:
        return Parsed(None)
    try:
        return Parsed(convert(raw))
    except ValueError:
        return Parsed(None, f"not a valid {kind}")


def _to_int(raw: str) -> int:
    if not _INTEGER.fullmatch(raw):
        raise ValueError(raw)
    return int(raw)


def parse_int(raw: str | None) -> Parsed:
    return _parse_with(raw, _to_int, "integer")


def parse_float(raw: str | None) -> Parsed:
    return _parse_with(raw, float, "float")


def _to_bool(raw: str) -> bool:
    text = raw.strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(raw)


def parse_bool(raw: str | None) -> Parsed:
    return _parse_with(raw, _to_bool, "boolean")


def parse_int_list(raw: str | None) -> Parsed:
    """Parse a whitespace separated list of integers, as used by XMI array references."""
    return _parse_with(raw, lambda text: [_to_int(item) for item in text.split()], "list of integers")


def require(outcome: Parsed) -> Parsed:
    """Turn an absent value into an error, leaving other outcomes untouched."""
    if outcome.ok and outcome.value is None:
        return Parsed(None, "required attribute is missing")
    return outcome
