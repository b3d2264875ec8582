import os
from pathlib import Path

import pytest

from allmind import repo_cache
from allmind.config import get_settings


@pytest.fixture(autouse=True)
def test_env(tmp_path: Path):
    root = tmp_path / "software"
    root.mkdir()
    os.environ["APP_ENV"] = "dev"
    os.environ["STRAP_ROOT"] = str(root)
    os.environ["STRAP_REGISTRY"] = str(root / "_strap" / "registry.json")
    os.environ["STRAP_CONFIG"] = str(root / "_strap" / "config.json")
    os.environ["SHIMS_DIR"] = str(root / "bin")
    os.environ["CHINVEX_URL"] = ""
    os.environ["PM2_PATH"] = str(tmp_path / "no-such-pm2")
    get_settings.cache_clear()
    repo_cache._reset()
    yield
    get_settings.cache_clear()
    repo_cache._reset()
