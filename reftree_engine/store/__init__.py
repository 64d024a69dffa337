"""In-memory collaborators and site documents."""

from .memory import (
    ANONYMOUS,
    FrozenClock,
    MemoryAccount,
    MemoryBundleRegistry,
    MemoryEntity,
    MemoryEntityStorage,
    MemorySchemaRegistry,
    MemoryStorageProvider,
    StaticLanguageContext,
    StaticUserContext,
    SystemClock,
    reference,
    text,
)
from .site import Site, SiteDocument, build_site, load_site

__all__ = [
    "ANONYMOUS",
    "FrozenClock",
    "MemoryAccount",
    "MemoryBundleRegistry",
    "MemoryEntity",
    "MemoryEntityStorage",
    "MemorySchemaRegistry",
    "MemoryStorageProvider",
    "StaticLanguageContext",
    "StaticUserContext",
    "SystemClock",
    "reference",
    "text",
    "Site",
    "SiteDocument",
    "build_site",
    "load_site",
]
