"""Known hub credentials from the environment and the config file."""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from ..core.config import Config, get_config

logger = logging.getLogger(__name__)

MAX_ENV_HUBS = 10


@dataclass(frozen=True)
class HubCredential:
    """A configured hub password, optionally with its last known address."""

    id: str
    credential: str
    known_address: str | None = None


class CredentialStore:
    """Reads ``HUB1``..``HUB10`` (plus ``HUBnIP``) and the config's ``hubs`` list.

    Environment entries come first. A config entry whose credential is
    already known from the environment only fills in a missing address.
    """

    def __init__(self, config: Config | None = None, environ: Mapping[str, str] | None = None):
        self.config = config or get_config()
        self.environ = os.environ if environ is None else environ

    def _from_environment(self) -> list[HubCredential]:
        found = []
        for index in range(1, MAX_ENV_HUBS + 1):
            password = self.environ.get(f"HUB{index}")
            if not password:
                continue
            address = self.environ.get(f"HUB{index}IP") or None
            found.append(HubCredential(id=str(index), credential=password, known_address=address))
        return found

    def _from_config(self) -> list[HubCredential]:
        found = []
        for position, entry in enumerate(self.config.hubs, start=1):
            password = entry.get("password") or entry.get("credential")
            if not password:
                logger.warning("Ignoring hub entry %d in config: no password", position)
                continue
            found.append(
                HubCredential(
                    id=str(entry.get("id", f"config-{position}")),
                    credential=str(password),
                    known_address=entry.get("ip") or entry.get("address") or None,
                )
            )
        return found

    def load(self) -> list[HubCredential]:
        """Return every configured credential, deduplicated by password."""
        merged: dict[str, HubCredential] = {}
        for item in self._from_environment() + self._from_config():
            existing = merged.get(item.credential)
            if existing is None:
                merged[item.credential] = item
            elif existing.known_address is None and item.known_address:
                merged[item.credential] = HubCredential(
                    existing.id, existing.credential, item.known_address
                )
        return list(merged.values())
