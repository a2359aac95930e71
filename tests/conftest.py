from __future__ import annotations

from pathlib import Path

import pytest

from goproctl.core.status_table import default_status_table


@pytest.fixture(autouse=True)
def isolated_status_tables(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    default_status_table.cache_clear()
    yield tmp_path
    default_status_table.cache_clear()
