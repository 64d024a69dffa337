"""Shared test fixtures."""

from typing import List

import pytest
from loguru import logger

from reftree_engine.builder import EntityReferenceTreeBuilder
from reftree_engine.cache.memory_backend import MemoryCacheBackend
from reftree_engine.models import Bundle, FieldDefinition
from reftree_engine.settings import TreeSettings
from reftree_engine.store.memory import (
    FrozenClock,
    MemoryAccount,
    MemoryBundleRegistry,
    MemoryEntity,
    MemoryEntityStorage,
    MemorySchemaRegistry,
    MemoryStorageProvider,
    StaticLanguageContext,
    StaticUserContext,
    reference,
    text,
)

ENTITY_TYPE = "wisski_individual"

# Generated field names, as a pathbuilder would produce them
NAME_FIELD = "f3a1c94e0b7d2f58"
PARENT_FIELD = "fd0b4e21a6c8f913"
SEE_ALSO_FIELD = "f77e02b9c1d4a6e0"


# ── Spy Collaborators ────────────────────────────────────────────────────

class SpyCacheBackend(MemoryCacheBackend):
    """MemoryCacheBackend that records every call."""

    def __init__(self, clock):
        super().__init__(clock)
        self.gets: List[str] = []
        self.sets: List[str] = []

    def get(self, key):
        self.gets.append(key)
        return super().get(key)

    def set(self, key, data, expire, tags):
        self.sets.append(key)
        super().set(key, data, expire, tags)


# ── Fixtures ─────────────────────────────────────────────────────────────

@pytest.fixture
def log_messages():
    """Capture loguru output as a list of formatted messages."""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def clock():
    return FrozenClock(1_700_000_000.0)


@pytest.fixture
def country_bundle():
    return Bundle(id="country", label="Country", entity_type=ENTITY_TYPE)


@pytest.fixture
def country_fields():
    return [
        FieldDefinition(name="langcode", base=True),
        FieldDefinition(name="eid", base=True),
        FieldDefinition(name=NAME_FIELD, label="Name"),
        FieldDefinition(name=PARENT_FIELD, label="Part of"),
    ]


@pytest.fixture
def country_entities():
    """Africa > South Africa > Johannesburg, stored flat."""
    return [
        MemoryEntity(
            entity_id=1,
            bundle_id="country",
            title="Africa",
            values={NAME_FIELD: text("Africa")},
            translations={"de": "Afrika"},
            entity_type=ENTITY_TYPE,
        ),
        MemoryEntity(
            entity_id=2,
            bundle_id="country",
            title="South Africa",
            values={NAME_FIELD: text("South Africa"), PARENT_FIELD: reference(1)},
            translations={"de": "Südafrika"},
            entity_type=ENTITY_TYPE,
        ),
        MemoryEntity(
            entity_id=3,
            bundle_id="country",
            title="Johannesburg",
            values={NAME_FIELD: text("Johannesburg"), PARENT_FIELD: reference("2")},
            entity_type=ENTITY_TYPE,
        ),
    ]


@pytest.fixture
def storage(country_entities):
    return MemoryEntityStorage(country_entities)


@pytest.fixture
def bundle_registry(country_bundle):
    return MemoryBundleRegistry([country_bundle])


@pytest.fixture
def schema_registry(country_fields):
    registry = MemorySchemaRegistry()
    registry.define(ENTITY_TYPE, "country", country_fields)
    return registry


@pytest.fixture
def editor():
    return MemoryAccount(name="editor", permissions={"access content"})


@pytest.fixture
def cache_backend(clock):
    return SpyCacheBackend(clock)


@pytest.fixture
def make_builder(storage, bundle_registry, schema_registry, cache_backend, clock, editor):
    """Factory for builders over the country site."""

    def _make(user=None, langcode="en", settings=None, **kwargs):
        return EntityReferenceTreeBuilder(
            storage_provider=MemoryStorageProvider({ENTITY_TYPE: storage}),
            bundle_registry=bundle_registry,
            schema_registry=schema_registry,
            cache_backend=cache_backend,
            language_context=StaticLanguageContext(langcode),
            user_context=StaticUserContext(user or editor),
            clock=clock,
            settings=settings or TreeSettings(),
            **kwargs,
        )

    return _make


@pytest.fixture
def builder(make_builder):
    return make_builder()
