from pathlib import Path

import pytest

from branchsync.repository import FakeRepository


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def fake_repo() -> FakeRepository:
    """FakeRepository with ``main`` checked out and synced with origin."""
    repo = FakeRepository()
    base = repo.add_commit()
    repo.local["main"] = base
    repo.set_remote("origin", {"main": base})
    return repo
