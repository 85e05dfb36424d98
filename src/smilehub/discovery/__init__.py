"""Gateway discovery - credential-guided probing and network sweeps."""

from .probe import Candidate, FailureReason, ProbeResult, ProbeStatus, probe
from .scanner import FirstMatch, NOT_FOUND_MESSAGE, ScanReport, Scanner, ScanSummary

__all__ = [
    "probe",
    "Candidate",
    "ProbeResult",
    "ProbeStatus",
    "FailureReason",
    "Scanner",
    "ScanSummary",
    "ScanReport",
    "FirstMatch",
    "NOT_FOUND_MESSAGE",
]
