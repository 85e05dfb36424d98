"""Actuator extraction: relays, thermostats and temperature offsets."""

import logging
from collections.abc import Callable
from typing import Any

from ..gateway.models import ActuatorData, GatewayEntity
from ..gateway.xml import ensure_list, parse_bool, parse_number, text_of

logger = logging.getLogger(__name__)

RelayPolicy = Callable[[list[dict[str, Any]]], list[dict[str, Any]]]

_THERMOSTAT_FIELDS = tuple(
    (name, name)
    for name in ("setpoint", "setpoint_low", "setpoint_high", "lower_bound", "upper_bound", "resolution")
)
_OFFSET_FIELDS = (
    ("offset", "setpoint"),
    ("lower_bound", "lower_bound"),
    ("upper_bound", "upper_bound"),
    ("resolution", "resolution"),
)


def _has_state(relay: Any) -> bool:
    return isinstance(relay, dict) and text_of(relay.get("state")) is not None


def first_relay(relays: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Expose only the first relay that reports a state."""
    for relay in relays:
        if _has_state(relay):
            return [relay]
    return []


def all_relays(relays: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Expose every relay that reports a state."""
    return [relay for relay in relays if _has_state(relay)]


def _parse_relays(
    funcs: dict[str, Any],
    entity: GatewayEntity,
    relay_policy: RelayPolicy,
) -> None:
    relays = ensure_list(funcs.get("relay_functionality"))
    for index, relay in enumerate(relay_policy(relays)):
        key = "relay" if index == 0 else f"relay_{index + 1}"
        entity.switches[key] = text_of(relay.get("state")) == "on"

        if index == 0 and relay.get("lock") is not None:
            lock = parse_bool(relay.get("lock"))
            if lock is not None:
                entity.switches["lock"] = lock


def _fill(actuator: ActuatorData, node: dict[str, Any], fields) -> None:
    for source_key, target_key in fields:
        value = parse_number(node.get(source_key))
        if value is not None:
            setattr(actuator, target_key, value)


def _checked(actuator: ActuatorData | None, kind: str, entity: GatewayEntity) -> ActuatorData | None:
    if actuator is None:
        return None
    if not actuator.within_bounds():
        logger.warning(
            "Dropping %s on %s: setpoint %s outside [%s, %s]",
            kind,
            entity.id,
            actuator.setpoint,
            actuator.lower_bound,
            actuator.upper_bound,
        )
        return None
    return actuator


def _parse_thermostats(funcs: dict[str, Any], entity: GatewayEntity) -> None:
    thermostat: ActuatorData | None = None
    for node in ensure_list(funcs.get("thermostat_functionality")):
        if not isinstance(node, dict):
            continue
        if thermostat is None:
            thermostat = ActuatorData()
        _fill(thermostat, node, _THERMOSTAT_FIELDS)

    entity.thermostat = _checked(thermostat, "thermostat", entity)


def _offset_nodes(funcs: dict[str, Any]) -> list[dict[str, Any]]:
    nodes = [n for n in ensure_list(funcs.get("temperature_offset_functionality")) if isinstance(n, dict)]
    # Newer firmware reports offsets as generic offset functionalities
    for node in ensure_list(funcs.get("offset_functionality")):
        if isinstance(node, dict) and text_of(node.get("type")) in (None, "temperature_offset"):
            nodes.append(node)
    return nodes


def _parse_temperature_offsets(funcs: dict[str, Any], entity: GatewayEntity) -> None:
    offset: ActuatorData | None = None
    for node in _offset_nodes(funcs):
        if offset is None:
            offset = ActuatorData()
        _fill(offset, node, _OFFSET_FIELDS)

    entity.temperature_offset = _checked(offset, "temperature offset", entity)


def parse_actuators(
    source: dict[str, Any],
    entity: GatewayEntity,
    relay_policy: RelayPolicy = first_relay,
) -> None:
    """Fill switches, thermostat and temperature offset from ``actuator_functionalities``."""
    funcs = source.get("actuator_functionalities")
    if not isinstance(funcs, dict):
        return

    _parse_relays(funcs, entity, relay_policy)
    _parse_thermostats(funcs, entity)
    _parse_temperature_offsets(funcs, entity)
