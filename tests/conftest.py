"""
Shared pytest fixtures for fastq-pairing tests.

Provides common helpers for:
- Writing small FASTQ inputs (plain, gzip, zstd)
- Capturing debug logs
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
for _path in (SRC_ROOT, REPO_ROOT):
    if _path.is_dir() and str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from pairing_core.logging_config import clear_log_context  # noqa: E402
from tests.fixtures import Read, fastq_bytes, write_raw  # noqa: E402


@pytest.fixture
def write_fastq(tmp_path: Path) -> Callable[..., Path]:
    """Write reads to ``tmp_path / name`` and return the path."""

    def _write(name: str, reads: Iterable[Read | str], codec: str = "none") -> Path:
        return write_raw(tmp_path / name, fastq_bytes(reads), codec)

    return _write


@pytest.fixture(autouse=True)
def _reset_log_context() -> None:
    clear_log_context()


@pytest.fixture
def debug_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    caplog.set_level(logging.DEBUG, logger="pairing_core")
    return caplog
