"""Gateway data models and result types."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class GatewayType(Enum):
    """Gateway families, as detected from model id and firmware."""

    THERMOSTAT = "thermostat"  # Adam, Anna
    POWER = "power"  # Smile P1
    STRETCH = "stretch"
    UNKNOWN = "unknown"


@dataclass
class GatewayInfo:
    """Identity of a gateway, read from the ``gateway`` block."""

    name: str
    model: str
    version: str
    type: GatewayType = GatewayType.UNKNOWN
    hostname: str = "unknown"
    hw_version: str | None = None
    mac_address: str | None = None
    model_id: str | None = None
    legacy: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "model": self.model,
            "version": self.version,
            "type": self.type.value,
            "hostname": self.hostname,
            "hw_version": self.hw_version,
            "mac_address": self.mac_address,
            "model_id": self.model_id,
            "legacy": self.legacy,
        }


@dataclass
class ActuatorData:
    """Setpoint and bounds of a thermostat or temperature offset actuator."""

    setpoint: float | None = None
    setpoint_low: float | None = None
    setpoint_high: float | None = None
    lower_bound: float | None = None
    upper_bound: float | None = None
    resolution: float | None = None

    def within_bounds(self) -> bool:
        """Check lower_bound <= setpoint <= upper_bound for known values."""
        if self.setpoint is None:
            return True
        if self.lower_bound is not None and self.setpoint < self.lower_bound:
            return False
        if self.upper_bound is not None and self.setpoint > self.upper_bound:
            return False
        return True

    def to_dict(self) -> dict:
        """Convert to dictionary, omitting unknown fields."""
        data = {
            "setpoint": self.setpoint,
            "setpoint_low": self.setpoint_low,
            "setpoint_high": self.setpoint_high,
            "lower_bound": self.lower_bound,
            "upper_bound": self.upper_bound,
            "resolution": self.resolution,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass
class GatewayEntity:
    """Normalized device (appliance) or zone (location) record."""

    id: str
    name: str
    dev_class: str
    vendor: str | None = None
    model: str | None = None
    firmware: str | None = None
    hardware: str | None = None
    mac_address: str | None = None
    location: str | None = None
    active_preset: str | None = None
    available: bool = True
    sensors: dict[str, float] = field(default_factory=dict)
    binary_sensors: dict[str, bool] = field(default_factory=dict)
    switches: dict[str, bool] = field(default_factory=dict)
    thermostat: ActuatorData | None = None
    temperature_offset: ActuatorData | None = None

    @property
    def is_zone(self) -> bool:
        return self.dev_class == "zone"

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "dev_class": self.dev_class,
            "vendor": self.vendor,
            "model": self.model,
            "firmware": self.firmware,
            "hardware": self.hardware,
            "mac_address": self.mac_address,
            "location": self.location,
            "active_preset": self.active_preset,
            "available": self.available,
            "sensors": dict(self.sensors),
            "binary_sensors": dict(self.binary_sensors),
            "switches": dict(self.switches),
            "thermostat": self.thermostat.to_dict() if self.thermostat else None,
            "temperature_offset": (
                self.temperature_offset.to_dict() if self.temperature_offset else None
            ),
        }


@dataclass
class GatewayData:
    """Result of extracting a full state document."""

    gateway_info: GatewayInfo
    gateway_id: str = ""
    heater_id: str = ""
    entities: list[GatewayEntity] = field(default_factory=list)

    def get_entity(self, entity_id: str) -> GatewayEntity | None:
        """Find an entity by appliance or location id."""
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        return None

    @property
    def zones(self) -> list[GatewayEntity]:
        return [e for e in self.entities if e.is_zone]

    @property
    def devices(self) -> list[GatewayEntity]:
        return [e for e in self.entities if not e.is_zone]

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "gateway_id": self.gateway_id,
            "heater_id": self.heater_id,
            "gateway_info": self.gateway_info.to_dict(),
            "entities": {e.id: e.to_dict() for e in self.entities},
        }


@dataclass
class DiscoveredGateway:
    """A gateway confirmed at an address for a credential."""

    name: str
    address: str
    credential: str
    model: str | None = None
    firmware: str | None = None
    discovered_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_info(cls, info: GatewayInfo, address: str, credential: str) -> "DiscoveredGateway":
        """Build a record from freshly probed gateway metadata."""
        return cls(
            name=info.name or credential,
            address=address,
            credential=credential,
            model=info.model,
            firmware=info.version,
        )

    @classmethod
    def from_record(cls, data: dict) -> "DiscoveredGateway":
        """Build from the flat on-disk record."""
        discovered_at = data.get("discoveredAt")
        if discovered_at and discovered_at.endswith("Z"):
            # fromisoformat only accepts a trailing Z from Python 3.11
            discovered_at = discovered_at[:-1] + "+00:00"
        return cls(
            name=data["name"],
            address=data["ip"],
            credential=data["password"],
            model=data.get("model"),
            firmware=data.get("firmware"),
            discovered_at=(
                datetime.fromisoformat(discovered_at) if discovered_at else datetime.now()
            ),
        )

    def to_record(self) -> dict:
        """Flat record persisted by the hub registry."""
        return {
            "name": self.name,
            "ip": self.address,
            "password": self.credential,
            "model": self.model,
            "firmware": self.firmware,
            "discoveredAt": self.discovered_at.isoformat(),
        }

    def to_dict(self) -> dict:
        """Convert to dictionary representation, credential masked."""
        return {
            "name": self.name,
            "address": self.address,
            "credential": mask_credential(self.credential),
            "model": self.model,
            "firmware": self.firmware,
            "discovered_at": self.discovered_at.isoformat(),
        }


def mask_credential(credential: str) -> str:
    """Keep only the first two characters of a credential."""
    if len(credential) <= 2:
        return "*" * len(credential)
    return credential[:2] + "*" * (len(credential) - 2)
