"""XML command fragments for gateway control endpoints.

Each builder returns ``(uri, payload)``; nothing here touches the network.
"""

from datetime import datetime, timezone
from xml.sax.saxutils import escape, quoteattr

from ..core.exceptions import ValidationError

GATEWAY_MODES = ("home", "away", "vacation")
DHW_MODES = ("auto", "boost", "comfort", "off")
REGULATION_MODES = ("heating", "off", "bleeding_cold", "bleeding_hot")

# Away/vacation stay active until explicitly changed
MODE_VALID_TO = "2037-04-21T08:00:53.000Z"
BLEEDING_DURATION = 300


def _format_number(value: float) -> str:
    return f"{value:g}"


def _check_choice(value: str, choices: tuple[str, ...], what: str) -> str:
    if value not in choices:
        raise ValidationError(f"Invalid {what}: {value}", f"Expected one of {', '.join(choices)}")
    return value


def thermostat_command(location_id: str, setpoint: float) -> tuple[str, str]:
    payload = (
        "<thermostat_functionality>"
        f"<setpoint>{_format_number(setpoint)}</setpoint>"
        "</thermostat_functionality>"
    )
    return f"/core/locations;id={location_id}/thermostat", payload


def temperature_offset_command(device_id: str, offset: float) -> tuple[str, str]:
    payload = f"<offset_functionality><offset>{_format_number(offset)}</offset></offset_functionality>"
    return f"/core/appliances;id={device_id}/offset;type=temperature_offset", payload


def relay_command(appliance_id: str, state: bool) -> tuple[str, str]:
    value = "on" if state else "off"
    payload = f"<relay_functionality><state>{value}</state></relay_functionality>"
    return f"/core/appliances;id={appliance_id}/relay", payload


def preset_command(location_id: str, name: str, location_type: str, preset: str) -> tuple[str, str]:
    """Rewrite a location with a new preset; name and type must be sent back unchanged."""
    payload = (
        f"<locations><location id={quoteattr(location_id)}>"
        f"<name>{escape(name)}</name>"
        f"<type>{escape(location_type)}</type>"
        f"<preset>{escape(preset)}</preset>"
        "</location></locations>"
    )
    return f"/core/locations;id={location_id}", payload


def gateway_mode_command(gateway_id: str, mode: str, now: datetime | None = None) -> tuple[str, str]:
    _check_choice(mode, GATEWAY_MODES, "gateway mode")

    valid = ""
    if mode in ("away", "vacation"):
        start = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H:%M:%S.000Z")
        valid = f"<valid_from>{start}</valid_from><valid_to>{MODE_VALID_TO}</valid_to>"

    payload = (
        "<gateway_mode_control_functionality>"
        f"<mode>{mode}</mode>{valid}"
        "</gateway_mode_control_functionality>"
    )
    return f"/core/appliances;id={gateway_id}/gateway_mode_control", payload


def dhw_mode_command(mode: str) -> tuple[str, str]:
    _check_choice(mode, DHW_MODES, "DHW mode")
    payload = (
        "<domestic_hot_water_mode_control_functionality>"
        f"<mode>{mode}</mode>"
        "</domestic_hot_water_mode_control_functionality>"
    )
    return "/core/appliances;type=heater_central/domestic_hot_water_mode_control", payload


def regulation_mode_command(mode: str) -> tuple[str, str]:
    _check_choice(mode, REGULATION_MODES, "regulation mode")
    duration = f"<duration>{BLEEDING_DURATION}</duration>" if "bleeding" in mode else ""
    payload = (
        "<regulation_mode_control_functionality>"
        f"{duration}<mode>{mode}</mode>"
        "</regulation_mode_control_functionality>"
    )
    return "/core/appliances;type=gateway/regulation_mode_control", payload
