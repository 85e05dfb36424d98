"""Configuration management for smilehub."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ScanConfig:
    """Network discovery configuration."""

    probe_timeout: float = 3.0  # seconds per handshake
    concurrency: int = 64
    progress_interval: int = 25  # log progress every N completed probes
    default_network: str | None = None


@dataclass
class SessionConfig:
    """Gateway HTTP session configuration."""

    username: str = "smile"
    port: int = 80
    timeout: float = 10.0
    command_timeout: float = 5.0


@dataclass
class Config:
    """Main configuration for smilehub."""

    data_dir: Path = field(default_factory=lambda: Path("./smilehub_data"))
    scan: ScanConfig = field(default_factory=ScanConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    hubs: list[dict] = field(default_factory=list)
    verbose: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.data_dir, str):
            self.data_dir = Path(self.data_dir)

    @property
    def hubs_dir(self) -> Path:
        """Directory holding one JSON record per discovered hub."""
        return self.data_dir / "hubs"

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """Load configuration from JSON file."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = json.load(f)

        config = cls()
        if "data_dir" in data:
            config.data_dir = Path(data["data_dir"])
        if "verbose" in data:
            config.verbose = data["verbose"]
        if "hubs" in data and isinstance(data["hubs"], list):
            config.hubs = [h for h in data["hubs"] if isinstance(h, dict)]

        if "scan" in data:
            for key, value in data["scan"].items():
                if hasattr(config.scan, key):
                    setattr(config.scan, key, value)

        if "session" in data:
            for key, value in data["session"].items():
                if hasattr(config.session, key):
                    setattr(config.session, key, value)

        return config

    def save(self, path: Path) -> None:
        """Save configuration to JSON file."""
        data = {
            "data_dir": str(self.data_dir),
            "verbose": self.verbose,
            "hubs": self.hubs,
            "scan": {
                "probe_timeout": self.scan.probe_timeout,
                "concurrency": self.scan.concurrency,
                "progress_interval": self.scan.progress_interval,
                "default_network": self.scan.default_network,
            },
            "session": {
                "username": self.session.username,
                "port": self.session.port,
                "timeout": self.session.timeout,
                "command_timeout": self.session.command_timeout,
            },
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(data, f, indent=2)


_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        config_path = Path(os.environ.get("SMILEHUB_CONFIG", ".smilehub.json"))
        _config = Config.from_file(config_path)
    return _config


def set_config(config: Config | None) -> None:
    """Set the global configuration instance (None forces a reload)."""
    global _config
    _config = config
