import os
from pathlib import Path

from allmind.config import get_settings
from allmind.shims.doctor import (
    check_launcher_pairs,
    check_registry_exists,
    check_shims_on_path,
    doctor_payload,
    run_shim_doctor,
)


def test_shims_dir_on_path(tmp_path: Path) -> None:
    shims_dir = tmp_path / "bin"
    shims_dir.mkdir()
    path_env = os.pathsep.join(["/usr/bin", str(shims_dir) + os.sep])
    check = check_shims_on_path(shims_dir, path_env)
    assert check.id == "SHIM001"
    assert check.passed is True
    assert check.severity == "critical"


def test_shims_dir_missing_from_path(tmp_path: Path) -> None:
    shims_dir = tmp_path / "bin"
    shims_dir.mkdir()
    check = check_shims_on_path(shims_dir, "/usr/bin")
    assert check.passed is False
    assert check.details == {"exists": True, "onPath": False, "path": str(shims_dir)}


def test_registry_check(tmp_path: Path) -> None:
    registry = tmp_path / "registry.json"
    assert check_registry_exists(registry).passed is False
    registry.write_text("{}", encoding="utf-8")
    assert check_registry_exists(registry).passed is True


def test_unpaired_launchers_are_flagged(tmp_path: Path) -> None:
    shims_dir = tmp_path / "bin"
    shims_dir.mkdir()
    (shims_dir / "paired.ps1").write_text("", encoding="utf-8")
    (shims_dir / "paired.cmd").write_text("", encoding="utf-8")
    (shims_dir / "lonely.ps1").write_text("", encoding="utf-8")
    checks = check_launcher_pairs(shims_dir)
    assert [(check.id, check.details["missing"]) for check in checks] == [
        ("SHIM008", "lonely.cmd")
    ]


def test_run_shim_doctor_payload() -> None:
    settings = get_settings()
    settings.shims_path.mkdir(parents=True)
    (settings.shims_path / "tool.ps1").write_text("", encoding="utf-8")
    checks = run_shim_doctor(settings, path_env=str(settings.shims_path))
    payload = doctor_payload(checks)
    assert [check["id"] for check in payload["checks"]] == ["SHIM001", "SHIM002", "SHIM008"]
    assert payload["summary"] == {"passed": 1, "failed": 2, "total": 3}
