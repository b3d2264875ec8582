"""Strap shim health checks."""

from __future__ import annotations

import os
from pathlib import Path

from allmind.config import Settings
from allmind.shims.types import DoctorCheck


def _normalize(entry: str) -> str:
    return os.path.normcase(entry.strip().rstrip("/\\"))


def check_shims_on_path(shims_dir: Path, path_env: str | None = None) -> DoctorCheck:
    raw_path = os.environ.get("PATH", "") if path_env is None else path_env
    entries = {_normalize(item) for item in raw_path.split(os.pathsep) if item.strip()}
    exists = shims_dir.is_dir()
    on_path = _normalize(str(shims_dir)) in entries
    return DoctorCheck(
        id="SHIM001",
        name="Shims directory on PATH",
        passed=exists and on_path,
        severity="critical",
        details={"exists": exists, "onPath": on_path, "path": str(shims_dir)},
    )


def check_registry_exists(registry_path: Path) -> DoctorCheck:
    return DoctorCheck(
        id="SHIM002",
        name="Strap registry exists",
        passed=registry_path.is_file(),
        severity="error",
        details={"path": str(registry_path)},
    )


def check_launcher_pairs(
    shims_dir: Path, *, script_suffix: str = ".ps1", companion_suffix: str = ".cmd"
) -> list[DoctorCheck]:
    """One failed check per script launcher whose companion launcher is missing."""
    if not shims_dir.is_dir():
        return []
    checks: list[DoctorCheck] = []
    for script in sorted(shims_dir.glob(f"*{script_suffix}")):
        name = script.name[: -len(script_suffix)]
        if (shims_dir / f"{name}{companion_suffix}").exists():
            continue
        checks.append(
            DoctorCheck(
                id="SHIM008",
                name=f"Launcher pair: {name}",
                passed=False,
                severity="warning",
                details={"missing": f"{name}{companion_suffix}"},
            )
        )
    return checks


def run_shim_doctor(settings: Settings, path_env: str | None = None) -> list[DoctorCheck]:
    shims_dir = settings.shims_path
    return [
        check_shims_on_path(shims_dir, path_env),
        check_registry_exists(settings.registry_path),
        *check_launcher_pairs(
            shims_dir,
            script_suffix=settings.shim_script_suffix,
            companion_suffix=settings.shim_companion_suffix,
        ),
    ]


def doctor_payload(checks: list[DoctorCheck]) -> dict[str, object]:
    passed = sum(1 for check in checks if check.passed)
    return {
        "summary": {"passed": passed, "failed": len(checks) - passed, "total": len(checks)},
        "checks": [
            {
                "id": check.id,
                "name": check.name,
                "passed": check.passed,
                "severity": check.severity,
                "details": check.details,
            }
            for check in checks
        ],
    }
