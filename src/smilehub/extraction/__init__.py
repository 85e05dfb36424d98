"""Domain-model extraction - gateway state XML to normalized entities."""

from .actuators import RelayPolicy, all_relays, first_relay, parse_actuators
from .appliances import parse_appliance, parse_location
from .extractor import extract, extract_document
from .gateway import detect_gateway_type, extract_gateway_ids, parse_gateway_info
from .measurements import BINARY_SENSOR_TYPES, parse_measurements

__all__ = [
    "extract",
    "extract_document",
    "parse_appliance",
    "parse_location",
    "parse_measurements",
    "parse_actuators",
    "parse_gateway_info",
    "extract_gateway_ids",
    "detect_gateway_type",
    "RelayPolicy",
    "first_relay",
    "all_relays",
    "BINARY_SENSOR_TYPES",
]
