"""Appliance (device) and location (zone) extraction."""

import logging
from typing import Any

from ..core.exceptions import ParseError
from ..core.utils import format_mac
from ..gateway.models import GatewayEntity
from ..gateway.xml import text_of
from .actuators import RelayPolicy, first_relay, parse_actuators
from .measurements import parse_measurements

logger = logging.getLogger(__name__)


def _require_id(node: Any, kind: str) -> str:
    if not isinstance(node, dict):
        raise ParseError(f"Malformed {kind} entry", f"expected element, got {type(node).__name__}")
    node_id = text_of(node.get("id"))
    if not node_id:
        raise ParseError(f"Malformed {kind} entry", "missing id attribute")
    return node_id


def _mac(node: dict[str, Any]) -> str | None:
    mac = text_of(node.get("mac_address"))
    return format_mac(mac) if mac else None


def _location_ref(appliance: dict[str, Any]) -> str | None:
    location = appliance.get("location")
    if isinstance(location, dict):
        return text_of(location.get("id"))
    return None


def parse_appliance(
    appliance: Any,
    relay_policy: RelayPolicy = first_relay,
) -> GatewayEntity | None:
    """Build an entity from an ``appliance`` element, None if it is malformed."""
    try:
        entity = GatewayEntity(
            id=_require_id(appliance, "appliance"),
            name=text_of(appliance.get("name")) or "Unknown Device",
            dev_class=text_of(appliance.get("type")) or "unknown",
            model=text_of(appliance.get("vendor_model")),
            vendor=text_of(appliance.get("vendor_name")),
            firmware=text_of(appliance.get("firmware_version")),
            hardware=text_of(appliance.get("hardware_version")),
            mac_address=_mac(appliance),
            location=_location_ref(appliance),
        )
        parse_measurements(appliance, entity)
        parse_actuators(appliance, entity, relay_policy)
        return entity
    except (ParseError, AttributeError, TypeError, ValueError) as e:
        logger.warning("Skipping appliance: %s", e)
        return None


def parse_location(
    location: Any,
    relay_policy: RelayPolicy = first_relay,
) -> GatewayEntity | None:
    """Build a zone entity from a ``location`` element, None if it is malformed."""
    try:
        entity = GatewayEntity(
            id=_require_id(location, "location"),
            name=text_of(location.get("name")) or "Unknown Location",
            dev_class="zone",
            active_preset=text_of(location.get("preset")),
        )
        parse_measurements(location, entity)
        parse_actuators(location, entity, relay_policy)
        return entity
    except (ParseError, AttributeError, TypeError, ValueError) as e:
        logger.warning("Skipping location: %s", e)
        return None
