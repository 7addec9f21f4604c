"""Shared pytest configuration for marker registration and execution ordering."""

from __future__ import annotations

import pytest


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast isolated unit tests")
    config.addinivalue_line("markers", "integration: filesystem/CLI integration tests")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Run fast unit tests first, integration tests last."""

    def sort_key(item: pytest.Item) -> tuple[int, str]:
        if item.get_closest_marker("integration"):
            return (1, item.nodeid)
        return (0, item.nodeid)

    items.sort(key=sort_key)


@pytest.fixture(autouse=True)
def _isolate_dump_far_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DUMP_FAR_BACKUP_EXT", "DUMP_FAR_ENCODING", "DUMP_FAR_SOURCE_TYPE"):
        # Register an undo so values loaded from .env files do not leak.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
