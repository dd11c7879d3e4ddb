"""Shared test fixtures and configuration."""

import os

import pytest

from chat_search.config import Settings
from chat_search.search.index_manager import IndexManager
from chat_search.search.storage import InMemoryKeyValueStore
from chat_search.services.search_service import ChatSearchService


TEST_ENV = {
    "CHAT_SEARCH_STORAGE_KEY": "test.chat_search.index",
    "CHAT_SEARCH_AUTOSAVE": "true",
    "CHAT_SEARCH_DEFAULT_LIMIT": "20",
    "CHAT_SEARCH_LOG_LEVEL": "info",
    "CHAT_SEARCH_LOG_JSON": "true",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value


SAMPLE_MESSAGES = [
    {
        "id": "1",
        "text": "I need to fix the authentication bug in the login system",
        "timestamp": 1640995200,
        "sender_name": "Alice",
    },
    {
        "id": "2",
        "text": "Let me review the database connection issue",
        "timestamp": 1640995260,
        "sender_name": "Bob",
    },
    {
        "id": "3",
        "text": "The deployment to production went smoothly yesterday",
        "timestamp": 1640995320,
        "sender_name": "Charlie",
    },
    {
        "id": "4",
        "text": "Can you check the API endpoint for user registration?",
        "timestamp": 1640995380,
        "sender_name": "David",
    },
    {
        "id": "5",
        "text": "Meeting scheduled for tomorrow morning at 9 AM",
        "timestamp": 1640995440,
        "sender_name": "Eve",
    },
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Pin CHAT_SEARCH_* variables so a developer's shell cannot leak in."""
    for key in list(os.environ):
        if key.startswith("CHAT_SEARCH_") and key not in TEST_ENV:
            monkeypatch.delenv(key, raising=False)
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def sample_messages():
    return [dict(message) for message in SAMPLE_MESSAGES]


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def settings():
    return Settings()  # type: ignore[call-arg]


@pytest.fixture
def manager(store, settings):
    return IndexManager(store, storage_key=settings.storage_key)


@pytest.fixture
def service(settings, store):
    return ChatSearchService(settings, store)
