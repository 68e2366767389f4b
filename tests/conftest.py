"""Shared test fixtures and configuration."""

from __future__ import annotations

from collections.abc import Callable, Iterator
import itertools

import pytest

from emoji_search.search.emoji_tokenizer import EmojiTokenizer
from emoji_search.search.storage import InMemorySnapshotStore
from emoji_search.service_layer.document_store import DocumentStore
from emoji_search.service_layer.search_service import SearchService


# Environment variables that would leak into Settings() during tests
SETTINGS_ENV_VARS = (
    "HOST",
    "PORT",
    "DATABASE_PATH",
    "LOG_LEVEL",
    "LOG_JSON",
    "KEYWORD_STEMMING",
    "CORS_ALLOW_ORIGINS",
    "GZIP_MINIMUM_SIZE",
    "OTLP_ENDPOINT",
    "SERVICE_NAME",
)


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Run every test with default settings and no stray .env file."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture(scope="session")
def tokenizer() -> EmojiTokenizer:
    return EmojiTokenizer()


@pytest.fixture
def sequential_ids() -> Callable[[], str]:
    """Deterministic document ids: doc-1, doc-2, ..."""
    counter = itertools.count(1)
    return lambda: f"doc-{next(counter)}"


@pytest.fixture
def snapshot_store() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture
def store(tokenizer, snapshot_store, sequential_ids) -> DocumentStore:
    return DocumentStore(tokenizer, snapshot_store=snapshot_store, id_factory=sequential_ids)


@pytest.fixture
def service(store) -> SearchService:
    return SearchService(store)
