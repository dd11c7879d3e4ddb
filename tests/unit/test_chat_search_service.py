"""Tests for the ChatSearchService facade and its factory."""

import logging

import pytest

from chat_search import build_search_service
from chat_search.config import Settings
from chat_search.observability.metrics import get_metrics
from chat_search.search.storage import InMemoryKeyValueStore
from chat_search.services.search_service import ChatSearchService


@pytest.mark.unit
@pytest.mark.asyncio
class TestIndexing:
    async def test_index_makes_search_available(self, service, sample_messages):
        assert await service.is_index_available() is False

        await service.index_documents(sample_messages, "test-chat-1")

        assert await service.is_index_available() is True
        stats = await service.stats()
        assert stats.total_documents == 5
        assert stats.per_scope_counts["test-chat-1"] == 5

    async def test_empty_batch_creates_no_scope_entry(self, service):
        await service.index_documents([], "empty-chat")

        stats = await service.stats()
        assert stats.total_documents == 0
        assert "empty-chat" not in stats.per_scope_counts

    async def test_short_messages_are_filtered(self, service, sample_messages):
        short = [
            {**sample_messages[0], "text": "hi"},
            {**sample_messages[1], "text": ""},
            {**sample_messages[2], "text": "ok"},
        ]

        await service.index_documents(short, "short-chat")

        assert (await service.stats()).total_documents == 0

    async def test_incremental_additions(self, service, sample_messages):
        await service.index_documents(sample_messages[:2], "test-chat")
        assert (await service.stats()).total_documents == 2

        await service.index_documents(sample_messages[2:], "test-chat")
        assert (await service.stats()).total_documents == 5

    async def test_updated_message_is_searchable_by_new_text(self, service, sample_messages):
        await service.index_documents(sample_messages[:2], "test-chat")

        edited = {**sample_messages[0], "text": "Updated authentication bug report"}
        await service.index_documents([edited], "test-chat")

        results = await service.search("authentication", "test-chat")
        assert "Updated authentication" in results[0].document.text
        assert (await service.stats()).total_documents == 2


@pytest.mark.unit
@pytest.mark.asyncio
class TestSearch:
    async def test_scenario(self, service, sample_messages):
        await service.index_documents(sample_messages, "chat1")

        hits = await service.search("authentication login", "chat1")
        assert len(hits) == 1
        assert "authentication" in hits[0].document.text
        assert hits[0].score > 0

        assert await service.search("cooking recipes", "chat1") == []

        await service.clear()
        stats = await service.stats()
        assert stats.total_documents == 0
        assert stats.per_scope_counts == {}

    async def test_searches_across_scopes_without_filter(self, service, sample_messages):
        await service.index_documents(sample_messages[:2], "chat1")
        await service.index_documents(sample_messages[2:4], "chat2")

        results = await service.search("bug system")

        assert len(results) == 1
        assert results[0].document.scope == "chat1"

    async def test_default_limit_comes_from_settings(self, store, sample_messages):
        service = ChatSearchService(Settings(default_limit=1), store)  # type: ignore[call-arg]
        await service.index_documents(
            [
                *sample_messages,
                {"id": "6", "text": "deployment checklist for friday"},
                {"id": "7", "text": "deployment rollback steps documented"},
            ],
            "chat1",
        )

        assert len(await service.search("deployment")) == 1
        assert len(await service.search("deployment", limit=10)) == 3

    async def test_search_records_metrics(self, service, sample_messages):
        await service.index_documents(sample_messages, "metrics-chat")
        await service.search("database", "metrics-chat")

        exposition = get_metrics()
        assert b"chat_search_query_latency_seconds" in exposition
        assert b'chat_search_query_results_count{scope="metrics-chat"}' in exposition


@pytest.mark.unit
@pytest.mark.asyncio
class TestPersistence:
    async def test_new_service_reads_persisted_index(self, settings, store, sample_messages):
        first = ChatSearchService(settings, store)
        await first.index_documents(sample_messages, "test-chat")

        second = ChatSearchService(settings, store)

        stats = await second.stats()
        assert stats == await first.stats()
        assert stats.per_scope_counts["test-chat"] == 5
        assert await second.search("authentication", "test-chat") == await first.search(
            "authentication", "test-chat"
        )

    async def test_corrupted_storage_starts_empty(self, settings, store):
        store.data[settings.storage_key] = '{"invalid": "data"}'

        service = ChatSearchService(settings, store)

        assert (await service.stats()).total_documents == 0

    async def test_reload_picks_up_external_changes(self, settings, store, sample_messages):
        writer = ChatSearchService(settings, store)
        reader = ChatSearchService(settings, store)
        assert (await reader.stats()).total_documents == 0

        await writer.index_documents(sample_messages, "test-chat")
        await reader.reload()

        assert (await reader.stats()).total_documents == 5

    async def test_reload_keeps_index_when_store_is_unreadable(self, settings, sample_messages):
        class FlakyStore(InMemoryKeyValueStore):
            offline = False

            async def get(self, key):
                if self.offline:
                    raise ConnectionError("storage offline")
                return await super().get(key)

        store = FlakyStore()
        service = ChatSearchService(settings, store)
        await service.index_documents(sample_messages, "test-chat")

        store.offline = True
        await service.reload()

        assert (await service.stats()).total_documents == 5
        assert await service.search("authentication bug")

    async def test_explicit_save_without_autosave(self, store, sample_messages):
        settings = Settings(autosave=False)  # type: ignore[call-arg]
        service = ChatSearchService(settings, store)
        await service.index_documents(sample_messages, "test-chat")
        assert settings.storage_key not in store.data

        await service.save()

        assert settings.storage_key in store.data


@pytest.mark.unit
class TestBuildSearchService:
    def test_defaults_to_in_memory_store(self, settings):
        service = build_search_service(settings, configure_logs=False)

        assert isinstance(service, ChatSearchService)
        assert isinstance(service.manager.store, InMemoryKeyValueStore)
        assert service.manager.storage_key == "test.chat_search.index"

    def test_uses_supplied_store_and_env_settings(self, store):
        service = build_search_service(store=store, configure_logs=False)

        assert service.manager.store is store
        assert service.settings.default_limit == 20

    def test_configures_logging_when_asked(self, settings):
        root = logging.getLogger()
        saved_handlers = root.handlers[:]
        saved_level = root.level
        try:
            build_search_service(settings)
            assert len(root.handlers) == 1
        finally:
            for handler in root.handlers[:]:
                root.removeHandler(handler)
            for handler in saved_handlers:
                root.addHandler(handler)
            root.setLevel(saved_level)
