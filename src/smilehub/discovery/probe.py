"""Single authenticated handshake against one candidate address."""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum

import aiohttp

from ..client.session import DEFAULT_PORT, DEFAULT_USERNAME, GatewaySession
from ..core.exceptions import (
    AuthenticationError,
    ConnectionError,
    ParseError,
    TimeoutError,
)
from ..gateway.models import GatewayInfo

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 3.0


class ProbeStatus(Enum):
    """Outcome of a probe."""

    MATCHED = "matched"
    NOT_MATCHED = "not_matched"
    FAILED = "failed"


class FailureReason(Enum):
    """Why a probe failed."""

    TIMEOUT = "timeout"
    CONNECTION_REFUSED = "connection_refused"
    AUTHENTICATION_REJECTED = "authentication_rejected"
    MALFORMED_RESPONSE = "malformed_response"


@dataclass(frozen=True)
class Candidate:
    """An (address, credential) pair to try."""

    address: str
    credential: str


@dataclass
class ProbeResult:
    """Result of probing one candidate."""

    address: str
    credential: str
    status: ProbeStatus
    info: GatewayInfo | None = None
    reason: FailureReason | None = None
    elapsed: float = 0.0

    @property
    def matched(self) -> bool:
        return self.status == ProbeStatus.MATCHED

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "status": self.status.value,
            "reason": self.reason.value if self.reason else None,
            "info": self.info.to_dict() if self.info else None,
            "elapsed_ms": round(self.elapsed * 1000, 2),
        }


async def probe(
    address: str,
    credential: str,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
    *,
    expected: bool = False,
    session: aiohttp.ClientSession | None = None,
    port: int = DEFAULT_PORT,
    username: str = DEFAULT_USERNAME,
) -> ProbeResult:
    """
    Try one credential against one address.

    Never raises and never retries. The whole handshake is bounded by
    ``timeout``, so a host that never answers yields ``FAILED(TIMEOUT)``.

    Args:
        address: Candidate IPv4 address
        credential: Gateway password to try
        timeout: Upper bound for the handshake in seconds
        expected: True when re-validating a known gateway; a rejected
            credential is then a failure rather than a non-match
        session: Shared aiohttp session, optional

    Returns:
        ProbeResult classifying the outcome
    """
    gateway = GatewaySession(
        address,
        credential,
        username=username,
        port=port,
        timeout=timeout,
        session=session,
    )
    start = time.monotonic()

    def result(status: ProbeStatus, info=None, reason=None) -> ProbeResult:
        outcome = ProbeResult(
            address=address,
            credential=credential,
            status=status,
            info=info,
            reason=reason,
            elapsed=time.monotonic() - start,
        )
        logger.debug(
            "Probe %s: %s%s",
            address,
            status.value,
            f" ({reason.value})" if reason else "",
        )
        return outcome

    try:
        info = await asyncio.wait_for(gateway.connect(), timeout)
    except AuthenticationError:
        if expected:
            return result(ProbeStatus.FAILED, reason=FailureReason.AUTHENTICATION_REJECTED)
        return result(ProbeStatus.NOT_MATCHED)
    except (asyncio.TimeoutError, TimeoutError):
        return result(ProbeStatus.FAILED, reason=FailureReason.TIMEOUT)
    except ParseError:
        return result(ProbeStatus.FAILED, reason=FailureReason.MALFORMED_RESPONSE)
    except ConnectionError as e:
        if e.status is not None:
            return result(ProbeStatus.FAILED, reason=FailureReason.MALFORMED_RESPONSE)
        return result(ProbeStatus.FAILED, reason=FailureReason.CONNECTION_REFUSED)
    except (aiohttp.ClientError, OSError, ValueError):
        return result(ProbeStatus.FAILED, reason=FailureReason.CONNECTION_REFUSED)

    return result(ProbeStatus.MATCHED, info=info)
