"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import json
import os
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path) -> Iterator[Path]:
    """Point XDG_CONFIG_HOME at a temporary directory for every test."""
    config_home = tmp_path / "xdg-config"
    with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(config_home)}):
        yield config_home


@pytest.fixture
def scan_dir(tmp_path: Path) -> Path:
    """An existing directory to scan."""
    path = tmp_path / "downloads"
    path.mkdir()
    return path


def _scan_row(full_name: str, length: int = 1024, when: str = "2024-05-01 10:00:00") -> dict:
    name = full_name.replace("\\", "/").rsplit("/", 1)[-1]
    ext = "." + name.rsplit(".", 1)[-1] if "." in name else ""
    return {
        "FullName": full_name,
        "Name": name,
        "Ext": ext,
        "Length": length,
        "LastWriteTimeStr": when,
    }


@pytest.fixture
def mock_scan_single() -> str:
    """Scan output for exactly one blocked file (bare object)."""
    return json.dumps(_scan_row("C:\\dl\\a.pdf"))


@pytest.fixture
def mock_scan_many() -> str:
    """Scan output for several blocked files, deliberately unsorted."""
    return json.dumps(
        [
            _scan_row("C:\\dl\\c.docx", 2048),
            _scan_row("C:\\dl\\B.pdf", 512),
            _scan_row("C:\\dl\\a.pdf", 1024),
        ]
    )


@pytest.fixture
def mock_unblock_ok() -> str:
    """Unblock output for two successful paths, with a WhatIf notice."""
    return (
        'What if: Performing the operation "Unblock-File" on target "C:\\dl\\a.pdf".\n'
        "OK\tC:\\dl\\a.pdf\n"
        "OK\tC:\\dl\\B.pdf\n"
    )


@pytest.fixture
def make_row() -> Callable[..., dict]:
    """Factory for rows as emitted by the scan script."""
    return _scan_row
