"""XML helpers for gateway payloads.

The gateway's documents are converted into plain nested dicts before any
extraction logic touches them:

- attributes are merged into the element's dict as ordinary keys
- text is trimmed; a leaf element becomes its text
- an element carrying both attributes and text keeps the text under ``"_"``
- a child tag seen once is stored bare, a repeated tag becomes a list

The last rule is what makes the shape "one or many". Callers never test for
it themselves; they go through :func:`ensure_list`.
"""

import math
from typing import Any

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as ET

from ..core.exceptions import ParseError

TEXT_KEY = "_"

_TRUE_VALUES = ("true", "on", "1", "yes")
_FALSE_VALUES = ("false", "off", "0", "no")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def _element_to_value(element: Any) -> Any:
    children = list(element)
    text = (element.text or "").strip()

    if not children and not element.attrib:
        return text

    node: dict[str, Any] = dict(element.attrib)
    repeated: set[str] = set()

    for child in children:
        tag = _local_name(child.tag)
        value = _element_to_value(child)
        if tag in repeated:
            node[tag].append(value)
        elif tag in node:
            node[tag] = [node[tag], value]
            repeated.add(tag)
        else:
            node[tag] = value

    if text:
        node[TEXT_KEY] = text
    return node


def parse_xml(xml: str | bytes) -> dict[str, Any]:
    """Parse an XML document into nested dicts keyed by the root tag.

    Raises:
        ParseError: If the document is not well-formed or uses forbidden
            constructs (entity expansion, external DTDs).
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        raise ParseError("Failed to parse XML", str(e)) from e
    except DefusedXmlException as e:
        raise ParseError("Refusing unsafe XML", str(e)) from e

    return {_local_name(root.tag): _element_to_value(root)}


def ensure_list(value: Any) -> list[Any]:
    """Coerce a one-or-many value into a list."""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def get_path(obj: Any, path: str) -> Any:
    """Follow a dotted path through nested dicts, None when any step is missing."""
    current = obj
    for part in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def text_of(value: Any) -> str | None:
    """Return the text content of a parsed node."""
    if isinstance(value, dict):
        value = value.get(TEXT_KEY)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_number(value: Any) -> float | None:
    """Coerce a parsed node to a finite float, None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = text_of(value)
        if text is None:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def parse_bool(value: Any) -> bool | None:
    """Coerce on/off and true/false style text, None when unrecognised."""
    if isinstance(value, bool):
        return value
    text = text_of(value)
    if text is None:
        return None
    lowered = text.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


def measurement_source(log: dict[str, Any]) -> Any:
    """Locate a log entry's measurement node, nested in a period or direct."""
    for period in ensure_list(log.get("period")):
        if isinstance(period, dict) and period.get("measurement") is not None:
            return period["measurement"]
    return log.get("measurement")


def extract_measurement(log: dict[str, Any]) -> float | None:
    """Read a log entry's numeric value.

    Several measurements in one period (tariff split) yield the first numeric one.
    """
    for candidate in ensure_list(measurement_source(log)):
        value = parse_number(candidate)
        if value is not None:
            return value
    return None
