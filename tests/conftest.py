import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'boardwise' and tests/ as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from boardwise.core.catalog import load_bundled_catalog
from boardwise.core.logging import reset_logging
from helpers.cache_utils import reset_boardwise_caches
from helpers.sysfs import FakeSysfs, build_rpi5_tree


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point user settings at an empty directory and drop leaked BOARDWISE_* vars.

    Without this, a developer's ~/.config/boardwise or exported overrides would
    change what the tests observe.
    """
    for key in list(os.environ):
        if key.startswith("BOARDWISE_"):
            monkeypatch.delenv(key, raising=False)
    home = tmp_path / "boardwise-home"
    home.mkdir()
    monkeypatch.setenv("BOARDWISE_CONFIG_HOME", str(home))
    reset_boardwise_caches()
    yield home
    reset_logging()
    reset_boardwise_caches()


@pytest.fixture
def bundled_catalog():
    return load_bundled_catalog()


@pytest.fixture
def fake_sysfs(tmp_path: Path) -> FakeSysfs:
    return FakeSysfs(tmp_path / "sysroot")


@pytest.fixture
def rpi5_root(tmp_path: Path) -> Path:
    return build_rpi5_tree(tmp_path / "rpi5-root").root
