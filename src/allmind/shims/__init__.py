"""Shim launcher reconciliation package."""

from allmind.shims.doctor import doctor_payload, run_shim_doctor
from allmind.shims.reader import read_shim_metadata
from allmind.shims.reconciler import (
    build_ownership,
    enumerate_shims,
    reconcile_from_settings,
    reconcile_shims,
    report_payload,
)

__all__ = [
    "build_ownership",
    "doctor_payload",
    "enumerate_shims",
    "read_shim_metadata",
    "reconcile_from_settings",
    "reconcile_shims",
    "report_payload",
    "run_shim_doctor",
]
