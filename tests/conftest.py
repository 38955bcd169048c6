"""
Pytest configuration and shared fixtures for rpmbaseline tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from datetime import datetime
import os
from pathlib import Path
from typing import Any

import pytest
import yaml

from rpmbaseline.logging import SilentLogger, set_global_logger


@pytest.fixture(autouse=True)
def silent_global_logger():
    """Reset the global logger so CLI tests do not leak verbosity."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("test.yaml", {"key": "value"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(data, f)
        return path

    return _create


@pytest.fixture
def create_package():
    """
    Factory fixture for creating package files with a given mtime.

    Usage:
        path = create_package(repo_dir, "httpd-2.4.6-18.el7.x86_64.rpm",
                              mtime=datetime(2024, 1, 1, 12, 0))
    """

    def _create(
        directory: Path, filename: str, mtime: datetime | None = None
    ) -> Path:
        path = directory / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"rpm")
        if mtime is not None:
            ts = mtime.timestamp()
            os.utime(path, (ts, ts))
        return path

    return _create


@pytest.fixture
def old_mtime() -> datetime:
    """A modification time well before any cutoff used in tests."""
    return datetime(2023, 6, 1, 12, 0, 0)


@pytest.fixture
def main_config_data(tmp_test_dir: Path) -> dict[str, Any]:
    """
    Provide a main configuration whose output lives under tmp_path.

    createrepo is referenced by name only; tests that build with indexing
    enabled mock the subprocess call.
    """
    served = tmp_test_dir / "www"
    return {
        "baseline_dir": str(served / "baselines"),
        "http_served_from": str(served),
        "http_server_uri": "http://repo.example.com",
        "createrepo_cmd": "createrepo_c",
        "workers": 2,
        "company": "Example Corp",
    }


@pytest.fixture
def baseline_data(tmp_test_dir: Path) -> dict[str, Any]:
    """Provide a baseline definition with one source directory."""
    return {
        "name": "el7-2024q1",
        "description": "EL7 baseline 2024 Q1",
        "platform": "rhel7",
        "type": "yum",
        "rpm_dirs": [{"dir": str(tmp_test_dir / "repo"), "date": "2024-03-31"}],
    }
