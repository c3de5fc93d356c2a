from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from sortify.config import ClassificationTable, SorterConfig  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    pkg_logger = logging.getLogger("sortify")
    for handler in pkg_logger.handlers[:]:
        handler.close()
        pkg_logger.removeHandler(handler)


@pytest.fixture
def small_table() -> ClassificationTable:
    return ClassificationTable({"jpg": "images", "txt": "documents"})


@pytest.fixture
def make_config(tmp_path: Path):
    def _make(**overrides) -> SorterConfig:
        overrides.setdefault("log_dir", None)
        overrides.setdefault("show_progress", False)
        return SorterConfig(**overrides)

    return _make


def write_file(path: Path, data: bytes = b"data") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path
