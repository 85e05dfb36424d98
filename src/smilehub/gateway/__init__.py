"""Gateway wire format - data models and XML helpers."""

from .models import (
    ActuatorData,
    DiscoveredGateway,
    GatewayData,
    GatewayEntity,
    GatewayInfo,
    GatewayType,
    mask_credential,
)
from .xml import (
    ensure_list,
    extract_measurement,
    get_path,
    parse_bool,
    parse_number,
    parse_xml,
    text_of,
)

__all__ = [
    "ActuatorData",
    "DiscoveredGateway",
    "GatewayData",
    "GatewayEntity",
    "GatewayInfo",
    "GatewayType",
    "mask_credential",
    "ensure_list",
    "extract_measurement",
    "get_path",
    "parse_bool",
    "parse_number",
    "parse_xml",
    "text_of",
]
