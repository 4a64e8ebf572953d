"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from vocab_mastery.config import get_settings  # noqa: E402
from vocab_mastery.core.models import VocabularyItem  # noqa: E402
from vocab_mastery.store.mastery_store import MasteryStore  # noqa: E402
from vocab_mastery.store.memory import InMemoryMasteryRepository  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory SQLite)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process; drop the cache around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def now():
    """A fixed, timezone-aware reference time."""
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_items():
    """A small vocabulary pool: two fruits, two animals, one untagged word."""
    return [
        VocabularyItem(id="apple", source_text="apple", target_text="maçã", tags=frozenset({"fruit"})),
        VocabularyItem(id="banana", source_text="banana", target_text="banana", tags=frozenset({"fruit"})),
        VocabularyItem(id="cat", source_text="cat", target_text="gato", tags=frozenset({"animal"})),
        VocabularyItem(id="dog", source_text="dog", target_text="cachorro", tags=frozenset({"animal"})),
        VocabularyItem(id="water", source_text="water", target_text="água"),
    ]


@pytest.fixture
def repository(sample_items):
    """In-memory repository preloaded with the sample pool."""
    return InMemoryMasteryRepository(sample_items)


@pytest.fixture
def store(repository):
    """Mastery store over the in-memory repository."""
    return MasteryStore(repository)
