from __future__ import annotations

import pytest

from garagehub.config import Settings


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        data_dir=str(tmp_path / "data"),
        log_dir=str(tmp_path / "logs"),
        upload_dir=str(tmp_path / "uploads"),
        upload_max_bytes=1024,
    )
