"""Credential-guided gateway discovery across an address space."""

import asyncio
import dataclasses
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from ..core.config import Config, get_config
from ..core.exceptions import ValidationError
from ..core.utils import detect_local_network, expand_address_space
from ..gateway.models import DiscoveredGateway, mask_credential
from ..registry.credentials import CredentialStore, HubCredential
from ..registry.store import HubRegistry
from .probe import Candidate, ProbeResult, probe

logger = logging.getLogger(__name__)

ProbeFunction = Callable[..., Awaitable[ProbeResult]]
ProgressCallback = Callable[[int, int], None]

NOT_FOUND_MESSAGE = "Hub not found on network {network}. Verify connectivity and credential."


class FirstMatch:
    """Single-assignment cell: the first offered result sticks."""

    def __init__(self) -> None:
        self._value: ProbeResult | None = None

    @property
    def is_set(self) -> bool:
        return self._value is not None

    @property
    def value(self) -> ProbeResult | None:
        return self._value

    def offer(self, result: ProbeResult) -> bool:
        """Record ``result`` unless a match is already held."""
        # No await between check and set: atomic on the event loop
        if self._value is not None:
            return False
        self._value = result
        return True


@dataclass
class ScanSummary:
    """Outcome of one ``locate`` call."""

    found: bool
    network: str
    addresses_checked: int
    elapsed: float
    address: str | None = None
    fast_path: bool = False

    @property
    def message(self) -> str:
        if self.found:
            return (
                f"Hub found at {self.address} after checking "
                f"{self.addresses_checked} address(es) in {self.elapsed:.1f}s"
            )
        return NOT_FOUND_MESSAGE.format(network=self.network)

    def to_dict(self) -> dict:
        return {
            "found": self.found,
            "address": self.address,
            "network": self.network,
            "addresses_checked": self.addresses_checked,
            "elapsed_seconds": round(self.elapsed, 3),
            "fast_path": self.fast_path,
            "message": self.message,
        }


@dataclass
class ScanReport:
    """Outcome of a multi-credential scan."""

    discovered: list[DiscoveredGateway] = field(default_factory=list)
    scanned_count: int = 0

    def to_dict(self) -> dict:
        return {
            "discovered": [hub.to_dict() for hub in self.discovered],
            "scanned_count": self.scanned_count,
        }


class Scanner:
    """
    Find gateways by trying credentials against candidate addresses.

    Probes run concurrently on one event loop, bounded by a semaphore.
    Once a credential has matched, probes for it that have not started yet
    are skipped; probes already in flight run to completion and their
    results are ignored.
    """

    def __init__(
        self,
        registry: HubRegistry,
        credentials: CredentialStore | None = None,
        config: Config | None = None,
        probe_fn: ProbeFunction | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        self.registry = registry
        self.config = config or get_config()
        self.credentials = credentials or CredentialStore(self.config)
        self.progress_callback = progress_callback
        self.last_summary: ScanSummary | None = None
        self._probe_fn = probe_fn

    @property
    def probe_timeout(self) -> float:
        return self.config.scan.probe_timeout

    async def _probe(self, address: str, credential: str, *, expected: bool = False) -> ProbeResult:
        if self._probe_fn is not None:
            return await self._probe_fn(address, credential, self.probe_timeout, expected=expected)
        return await probe(
            address,
            credential,
            self.probe_timeout,
            expected=expected,
            port=self.config.session.port,
            username=self.config.session.username,
        )

    def _resolve(self, address_space: str | list[str] | None) -> tuple[str, list[str]]:
        if address_space is None:
            address_space = self.config.scan.default_network or detect_local_network()
        label = address_space if isinstance(address_space, str) else ", ".join(address_space)
        return label, expand_address_space(address_space)

    def _report_progress(self, completed: int, total: int, start: float) -> None:
        if self.progress_callback is not None:
            self.progress_callback(completed, total)

        interval = max(self.config.scan.progress_interval, 1)
        if completed % interval == 0 or completed == total:
            logger.info(
                "Scan progress: %d/%d addresses (%.1fs)",
                completed,
                total,
                time.monotonic() - start,
            )

    async def _sweep(self, candidates: list[Candidate], matches: dict[str, FirstMatch]) -> int:
        """Probe candidates concurrently, filling one cell per credential.

        Returns the number of probes actually issued.
        """
        semaphore = asyncio.Semaphore(max(self.config.scan.concurrency, 1))
        total = len(candidates)
        start = time.monotonic()
        completed = 0
        issued = 0

        async def run(candidate: Candidate) -> None:
            nonlocal completed, issued
            async with semaphore:
                cell = matches[candidate.credential]
                if not cell.is_set:
                    issued += 1
                    result = await self._probe(candidate.address, candidate.credential)
                    if result.matched and not cell.offer(result):
                        logger.debug("Discarding late match at %s", result.address)
            completed += 1
            self._report_progress(completed, total, start)

        await asyncio.gather(*(run(c) for c in candidates))
        return issued

    async def locate(
        self,
        credential: str,
        address_space: str | list[str] | None = None,
    ) -> DiscoveredGateway | None:
        """
        Find the gateway accepting ``credential``.

        Tries the registry's stored address first, then sweeps the address
        space (default: the local /24). The match is persisted.

        Args:
            credential: Gateway password
            address_space: CIDR, range or address list to sweep

        Returns:
            The discovered gateway, or None. ``last_summary`` holds the outcome.
        """
        start = time.monotonic()
        masked = mask_credential(credential)

        known = self.registry.lookup(credential)
        if known is not None:
            result = await self._probe(known.address, credential, expected=True)
            if result.matched:
                hub = dataclasses.replace(
                    known,
                    name=result.info.name or known.name,
                    model=result.info.model,
                    firmware=result.info.version,
                )
                self.registry.persist(hub)
                self.last_summary = ScanSummary(
                    found=True,
                    network=known.address,
                    addresses_checked=1,
                    elapsed=time.monotonic() - start,
                    address=hub.address,
                    fast_path=True,
                )
                logger.info("Hub %s re-verified at %s", hub.name, hub.address)
                return hub
            logger.info(
                "Stored address %s for %s did not verify (%s), sweeping",
                known.address,
                masked,
                result.reason.value if result.reason else result.status.value,
            )

        network, addresses = self._resolve(address_space)
        logger.info("Sweeping %s (%d addresses) for %s", network, len(addresses), masked)

        matches = {credential: FirstMatch()}
        issued = await self._sweep([Candidate(a, credential) for a in addresses], matches)
        checked = issued + (1 if known is not None else 0)
        elapsed = time.monotonic() - start

        match = matches[credential].value
        if match is None:
            self.last_summary = ScanSummary(
                found=False, network=network, addresses_checked=checked, elapsed=elapsed
            )
            logger.warning(
                "%s (%d addresses checked in %.1fs)", self.last_summary.message, checked, elapsed
            )
            return None

        hub = DiscoveredGateway.from_info(match.info, match.address, credential)
        self.registry.persist(hub)
        self.last_summary = ScanSummary(
            found=True,
            network=network,
            addresses_checked=checked,
            elapsed=elapsed,
            address=hub.address,
        )
        logger.info(self.last_summary.message)
        return hub

    async def _verify_known(self, items: list[HubCredential]) -> list[tuple[HubCredential, ProbeResult]]:
        results = await asyncio.gather(
            *(self._probe(item.known_address, item.credential, expected=True) for item in items)
        )
        return list(zip(items, results))

    async def scan(self, address_space: str | list[str] | None = None) -> ScanReport:
        """
        Discover every configured hub.

        Known addresses from the credential store are verified first. The
        network is swept when ``address_space`` is given or no addresses are
        known, trying each still-unmatched credential at every address.

        Raises:
            ValidationError: If no credentials are configured.
        """
        configured = self.credentials.load()
        if not configured:
            raise ValidationError(
                "No hub credentials configured",
                "Set HUB1, HUB2, ... or add a 'hubs' list to the config file",
            )

        report = ScanReport()
        matched: set[str] = set()

        with_address = [c for c in configured if c.known_address]
        if with_address:
            logger.info("Testing %d known hub address(es)", len(with_address))
            for item, result in await self._verify_known(with_address):
                report.scanned_count += 1
                if not result.matched:
                    logger.info("No hub at %s", item.known_address)
                    continue
                hub = DiscoveredGateway.from_info(result.info, item.known_address, item.credential)
                self.registry.persist(hub)
                report.discovered.append(hub)
                matched.add(item.credential)
                logger.info("Found hub at %s: %s", hub.address, hub.name)

        remaining = [c.credential for c in configured if c.credential not in matched]
        if remaining and (address_space is not None or not with_address):
            network, addresses = self._resolve(address_space)
            logger.info(
                "Sweeping %s (%d addresses) for %d credential(s)",
                network,
                len(addresses),
                len(remaining),
            )
            matches = {credential: FirstMatch() for credential in remaining}
            candidates = [Candidate(a, c) for a in addresses for c in remaining]
            report.scanned_count += await self._sweep(candidates, matches)

            for credential in remaining:
                result = matches[credential].value
                if result is None:
                    continue
                hub = DiscoveredGateway.from_info(result.info, result.address, credential)
                self.registry.persist(hub)
                report.discovered.append(hub)
                logger.info("Found hub at %s: %s", hub.address, hub.name)

        logger.info(
            "Scan complete: %d hub(s) found, %d probe(s)",
            len(report.discovered),
            report.scanned_count,
        )
        return report

    async def load_known(self) -> list[DiscoveredGateway]:
        """
        Register every configured hub that has a known address.

        Reachable hubs get fresh metadata; unreachable ones are kept with
        their credential and address only. Nothing is written to disk.
        """
        with_address = [c for c in self.credentials.load() if c.known_address]
        if not with_address:
            logger.info("No configured hubs with known addresses")
            return []

        loaded = []
        for item, result in await self._verify_known(with_address):
            if result.matched:
                hub = DiscoveredGateway.from_info(result.info, item.known_address, item.credential)
                hub.name = result.info.name or f"Hub {item.id}"
                logger.info("Loaded hub %s at %s: %s", item.id, hub.address, hub.name)
            else:
                hub = DiscoveredGateway(
                    name=f"Hub {item.id}",
                    address=item.known_address,
                    credential=item.credential,
                )
                logger.warning(
                    "Loaded hub %s at %s (connection failed, credentials only)",
                    item.id,
                    item.known_address,
                )
            self.registry.add(hub)
            loaded.append(hub)

        return loaded
