"""Sensor extraction from point, cumulative and interval logs."""

import logging
from typing import Any

from ..gateway.models import GatewayEntity
from ..gateway.xml import ensure_list, extract_measurement, measurement_source, parse_bool, text_of

logger = logging.getLogger(__name__)

# (log kind, key suffix used only when the type is already taken)
LOG_KINDS = (
    ("point_log", ""),
    ("cumulative_log", "_cumulative"),
    ("interval_log", "_interval"),
)

BINARY_SENSOR_TYPES = frozenset(
    {
        "compressor_state",
        "cooling_enabled",
        "cooling_state",
        "dhw_state",
        "flame_state",
        "heating_state",
        "low_battery",
        "secondary_boiler_state",
    }
)


def _binary_state(log: dict[str, Any]) -> bool | None:
    for candidate in ensure_list(measurement_source(log)):
        state = parse_bool(candidate)
        if state is not None:
            return state
    return None


def parse_measurements(source: dict[str, Any], entity: GatewayEntity) -> None:
    """Merge every log of ``source`` into the entity's sensor maps.

    Entries without a type or without a usable value are skipped.
    """
    logs = source.get("logs")
    if not isinstance(logs, dict):
        return

    for kind, suffix in LOG_KINDS:
        for log in ensure_list(logs.get(kind)):
            if not isinstance(log, dict):
                continue

            log_type = text_of(log.get("type"))
            if not log_type:
                continue

            if kind == "point_log" and log_type in BINARY_SENSOR_TYPES:
                state = _binary_state(log)
                if state is not None:
                    entity.binary_sensors[log_type] = state
                    continue

            value = extract_measurement(log)
            if value is None:
                logger.debug("Skipping non-numeric %s %s on %s", kind, log_type, entity.id)
                continue

            key = log_type
            if suffix and key in entity.sensors:
                key = f"{log_type}{suffix}"
            entity.sensors[key] = value
