"""Site documents - a JSON snapshot of bundles, entities and accounts.

A site document is what the CLI builds trees from. Example:

{
  "entity_type": "wisski_individual",
  "bundles": [
    {"id": "country", "label": "Country",
     "fields": [{"name": "langcode", "base": true}, {"name": "f0a1b2", "label": "Part of"}]}
  ],
  "entities": [
    {"id": 1, "bundle": "country", "label": "Africa",
     "translations": {"de": "Afrika"},
     "values": {"f0a1b2": {"main_property": "target_id", "items": []}}}
  ],
  "accounts": [{"name": "editor", "permissions": ["access content"]}]
}
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from reftree_engine.errors import SiteDocumentError
from reftree_engine.models import Bundle, EntityId, FieldDefinition, FieldValues
from reftree_engine.store.memory import (
    ANONYMOUS,
    MemoryAccount,
    MemoryBundleRegistry,
    MemoryEntity,
    MemoryEntityStorage,
    MemorySchemaRegistry,
    MemoryStorageProvider,
)


class FieldSchema(BaseModel):
    """Field definition in a site document"""

    name: str
    base: bool = False
    label: Optional[str] = None


class BundleSchema(BaseModel):
    """Bundle in a site document"""

    id: str
    label: str
    fields: List[FieldSchema] = Field(default_factory=list)


class EntitySchema(BaseModel):
    """Entity in a site document"""

    id: Union[int, str]
    bundle: str
    label: str
    translations: Dict[str, str] = Field(default_factory=dict)
    values: Dict[str, FieldValues] = Field(default_factory=dict)
    viewable: bool = True


class AccountSchema(BaseModel):
    """Account in a site document"""

    name: str
    permissions: List[str] = Field(default_factory=list)


class SiteDocument(BaseModel):
    """Complete site document."""

    entity_type: str = Field(default="wisski_individual")
    bundle_key: str = Field(default="bundle")
    bundles: List[BundleSchema] = Field(default_factory=list)
    entities: List[EntitySchema] = Field(default_factory=list)
    accounts: List[AccountSchema] = Field(default_factory=list)


@dataclass
class Site:
    """Collaborators loaded from a site document."""

    entity_type: str
    storage_provider: MemoryStorageProvider
    storage: MemoryEntityStorage
    bundle_registry: MemoryBundleRegistry
    schema_registry: MemorySchemaRegistry
    accounts: Dict[str, MemoryAccount]

    def account(self, name: Optional[str]) -> MemoryAccount:
        """Look up an account by name; None means anonymous."""
        if name is None:
            return ANONYMOUS
        if name not in self.accounts:
            raise SiteDocumentError(f"Unknown account: {name}")
        return self.accounts[name]

    def entity_ids(self) -> List[EntityId]:
        return [entity.id for entity in self.storage.load_by_properties({})]


def build_site(document: SiteDocument) -> Site:
    """Create in-memory collaborators from a validated document."""
    entity_type = document.entity_type
    bundle_registry = MemoryBundleRegistry()
    schema_registry = MemorySchemaRegistry()
    storage = MemoryEntityStorage(bundle_key=document.bundle_key)

    for bundle in document.bundles:
        bundle_registry.add(Bundle(id=bundle.id, label=bundle.label, entity_type=entity_type))
        schema_registry.define(
            entity_type,
            bundle.id,
            [FieldDefinition(name=f.name, base=f.base, label=f.label) for f in bundle.fields],
        )

    for entity in document.entities:
        storage.add(
            MemoryEntity(
                entity_id=entity.id,
                bundle_id=entity.bundle,
                title=entity.label,
                values=dict(entity.values),
                translations=dict(entity.translations),
                viewable=entity.viewable,
                entity_type=entity_type,
            )
        )

    accounts = {
        account.name: MemoryAccount(name=account.name, permissions=set(account.permissions))
        for account in document.accounts
    }

    logger.debug(
        f"Loaded site: {len(document.bundles)} bundles, {len(document.entities)} entities, {len(accounts)} accounts"
    )

    return Site(
        entity_type=entity_type,
        storage_provider=MemoryStorageProvider({entity_type: storage}),
        storage=storage,
        bundle_registry=bundle_registry,
        schema_registry=schema_registry,
        accounts=accounts,
    )


def load_site(path: Path) -> Site:
    """Read and validate a site document from a JSON file.

    Raises:
        SiteDocumentError: If the file cannot be read or does not validate
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SiteDocumentError(f"Cannot read site document {path}: {e}") from e

    try:
        document = SiteDocument.model_validate(raw)
    except ValidationError as e:
        raise SiteDocumentError(f"Invalid site document {path}: {e}") from e

    return build_site(document)
