"""Gateway identity extraction and gateway type detection."""

from typing import Any

from ..core.utils import format_mac
from ..gateway.models import GatewayInfo, GatewayType
from ..gateway.xml import ensure_list, get_path, text_of

# vendor_model fragments of the climate gateways
ADAM_MODEL_ID = "159"
ANNA_MODEL_ID = "143"


def detect_gateway_type(model: str, version: str) -> GatewayType:
    """Detect Adam/Anna (thermostat), Smile P1 (power) or Stretch."""
    if ADAM_MODEL_ID in model or ANNA_MODEL_ID in model:
        return GatewayType.THERMOSTAT
    if "smile_v" in version:
        return GatewayType.POWER
    if "stretch_v" in version:
        return GatewayType.STRETCH
    return GatewayType.UNKNOWN


def parse_gateway_info(data: dict[str, Any]) -> GatewayInfo | None:
    """Read the ``domain_objects.gateway`` block, None when absent."""
    blocks = [b for b in ensure_list(get_path(data, "domain_objects.gateway")) if isinstance(b, dict)]
    if not blocks:
        return None
    gateway = blocks[0]

    model = text_of(gateway.get("vendor_model")) or "Unknown"
    mac = text_of(gateway.get("mac_address"))
    version = text_of(gateway.get("firmware_version")) or "0.0.0"

    return GatewayInfo(
        name=text_of(gateway.get("name")) or "Plugwise Gateway",
        model=model,
        version=version,
        type=detect_gateway_type(model, version),
        hostname=text_of(gateway.get("hostname")) or "unknown",
        hw_version=text_of(gateway.get("hardware_version")),
        mac_address=format_mac(mac) if mac else None,
        model_id=text_of(gateway.get("vendor_model")),
    )


def extract_gateway_ids(data: dict[str, Any]) -> tuple[str, str]:
    """Return the (gateway, heater_central) appliance ids, empty when absent."""
    gateway_id = ""
    heater_id = ""
    for appliance in ensure_list(get_path(data, "domain_objects.appliance")):
        if not isinstance(appliance, dict):
            continue
        appliance_type = text_of(appliance.get("type"))
        if appliance_type == "gateway":
            gateway_id = text_of(appliance.get("id")) or ""
        elif appliance_type == "heater_central":
            heater_id = text_of(appliance.get("id")) or ""
    return gateway_id, heater_id
