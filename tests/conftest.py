import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

REPO = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO))

from flyby.satellites.tle_db import SatelliteIdentity, TleDatabase


@pytest.fixture
def tle_db():
    return TleDatabase([SatelliteIdentity(11111, "SAT-A"), SatelliteIdentity(22222, "SAT-B")])


@pytest.fixture
def write_db(tmp_path):
    """Write text to a file below tmp_path, creating directories"""

    def _write(relative, text):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    return _write


@pytest.fixture
def xdg(tmp_path, monkeypatch):
    """Isolated XDG directories: one user data home and two system data dirs"""
    home = tmp_path / "home"
    system_high = tmp_path / "system-high"
    system_low = tmp_path / "system-low"
    config_home = tmp_path / "config"

    monkeypatch.setenv("XDG_DATA_HOME", str(home))
    monkeypatch.setenv("XDG_DATA_DIRS", f"{system_high}:{system_low}")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))

    return SimpleNamespace(
        primary=home / "flyby" / "flyby.db",
        shared_high=system_high / "flyby" / "flyby.db",
        shared_low=system_low / "flyby" / "flyby.db",
        config_home=config_home,
    )
