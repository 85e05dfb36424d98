"""Durable store of discovered hubs, one JSON file per credential."""

import json
import logging
from pathlib import Path

from ..core.exceptions import StorageError, ValidationError
from ..gateway.models import DiscoveredGateway

logger = logging.getLogger(__name__)


class HubRegistry:
    """Discovered gateways keyed by credential.

    Records live in memory and, once persisted, as ``<credential>.json`` in
    ``directory``. ``add`` only touches memory; ``persist`` writes through.
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)
        self._hubs: dict[str, DiscoveredGateway] = {}

    def __len__(self) -> int:
        return len(self._hubs)

    def __contains__(self, credential: str) -> bool:
        return credential in self._hubs

    def _path(self, credential: str) -> Path:
        """Record file for ``credential``.

        Raises:
            ValidationError: If the credential cannot be used as a file name.
        """
        if not credential or "/" in credential or "\\" in credential or ".." in credential:
            raise ValidationError("Invalid credential", "must not be empty or contain path separators")
        return self.directory / f"{credential}.json"

    def lookup(self, credential: str) -> DiscoveredGateway | None:
        """Find a hub by credential, reading its file if not yet loaded."""
        hub = self._hubs.get(credential)
        if hub is not None:
            return hub

        path = self._path(credential)
        if path.exists():
            hub = self._read(path)
            if hub is not None:
                self._hubs[credential] = hub
        return hub

    def add(self, hub: DiscoveredGateway) -> None:
        self._hubs[hub.credential] = hub

    def persist(self, hub: DiscoveredGateway) -> Path:
        """Store a hub in memory and write its record to disk.

        Raises:
            ValidationError: If the credential cannot be used as a file name.
            StorageError: If the record cannot be written.
        """
        path = self._path(hub.credential)
        self.add(hub)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                json.dump(hub.to_record(), f, indent=2)
        except OSError as e:
            raise StorageError(f"Failed to save hub {hub.name}", str(e)) from e

        logger.debug("Saved hub %s (%s) to %s", hub.name, hub.address, path)
        return path

    def get_by_address(self, address: str) -> DiscoveredGateway | None:
        for hub in self._hubs.values():
            if hub.address == address:
                return hub
        return None

    def all(self) -> list[DiscoveredGateway]:
        return list(self._hubs.values())

    def first(self) -> DiscoveredGateway | None:
        return next(iter(self._hubs.values()), None)

    def remove(self, credential: str) -> bool:
        """Forget a hub and delete its file; False if it was unknown."""
        path = self._path(credential)
        known = self._hubs.pop(credential, None) is not None
        if path.exists():
            try:
                path.unlink()
            except OSError as e:
                raise StorageError(f"Failed to remove hub record {path.name}", str(e)) from e
            known = True
        return known

    def load_all(self) -> list[DiscoveredGateway]:
        """Load every record in the directory, skipping unreadable files."""
        if not self.directory.is_dir():
            return []

        loaded = []
        for path in sorted(self.directory.glob("*.json")):
            hub = self._read(path)
            if hub is None:
                continue
            self._hubs[hub.credential] = hub
            loaded.append(hub)

        logger.debug("Loaded %d hub(s) from %s", len(loaded), self.directory)
        return loaded

    def _read(self, path: Path) -> DiscoveredGateway | None:
        try:
            with open(path) as f:
                return DiscoveredGateway.from_record(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Skipping unreadable hub record %s: %s", path.name, e)
            return None
