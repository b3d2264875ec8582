"""Live-state probe adapters."""

from allmind.probes.local import LocalProbes
from allmind.probes.result import ProbeFailed, ProbeOk, ProbeResult, run_probe, value_or
from allmind.probes.types import RepoProbes

__all__ = [
    "LocalProbes",
    "ProbeFailed",
    "ProbeOk",
    "ProbeResult",
    "RepoProbes",
    "run_probe",
    "value_or",
]
