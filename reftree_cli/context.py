"""Wiring of a tree builder over a site document."""

from typing import Optional

from reftree_engine.builder import EntityReferenceTreeBuilder
from reftree_engine.cache.memory_backend import MemoryCacheBackend
from reftree_engine.settings import TreeSettings
from reftree_engine.store.memory import StaticLanguageContext, StaticUserContext, SystemClock
from reftree_engine.store.site import Site


def create_builder(site: Site, settings: TreeSettings, user: Optional[str] = None, langcode: str = "en"):
    """Create a builder whose current user and language come from the command line."""
    clock = SystemClock()
    return EntityReferenceTreeBuilder(
        storage_provider=site.storage_provider,
        bundle_registry=site.bundle_registry,
        schema_registry=site.schema_registry,
        cache_backend=MemoryCacheBackend(clock),
        language_context=StaticLanguageContext(langcode),
        user_context=StaticUserContext(site.account(user)),
        clock=clock,
        settings=settings,
    )
