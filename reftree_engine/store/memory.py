"""Dict-backed implementations of the collaborator interfaces."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from reftree_engine.errors import EntityTypeNotFound
from reftree_engine.interfaces import (
    Account,
    BundleRegistry,
    Clock,
    Entity,
    EntityStorage,
    LanguageContext,
    SchemaRegistry,
    StorageProvider,
    UserContext,
)
from reftree_engine.models import Bundle, EntityId, FieldDefinition, FieldValues, ValueMap


# ============================================================================
# Entities
# ============================================================================


@dataclass
class MemoryEntity(Entity):
    """An entity held in memory.

    ``translations`` maps language codes to translated labels.
    """

    entity_id: EntityId
    bundle_id: str
    title: str
    values: ValueMap = field(default_factory=dict)
    translations: Dict[str, str] = field(default_factory=dict)
    viewable: bool = True
    entity_type: str = "entity"
    langcode: Optional[str] = None

    @property
    def id(self) -> EntityId:
        return self.entity_id

    @property
    def bundle(self) -> str:
        return self.bundle_id

    @property
    def cache_tags(self) -> List[str]:
        return [f"{self.entity_type}:{self.entity_id}"]

    def label(self) -> str:
        return self.title

    def access(self, operation: str) -> bool:
        return self.viewable

    def has_translation(self, langcode: str) -> bool:
        return langcode in self.translations

    def get_translation(self, langcode: str) -> "MemoryEntity":
        if langcode not in self.translations:
            raise KeyError(f"Entity {self.entity_id} has no {langcode} translation")
        return MemoryEntity(
            entity_id=self.entity_id,
            bundle_id=self.bundle_id,
            title=self.translations[langcode],
            values=self.values,
            translations=self.translations,
            viewable=self.viewable,
            entity_type=self.entity_type,
            langcode=langcode,
        )

    def get_values(self, storage: EntityStorage) -> ValueMap:
        return self.values


class MemoryEntityStorage(EntityStorage):
    """Entities of one type, kept in insertion order."""

    def __init__(self, entities: Optional[List[Entity]] = None, bundle_key: str = "bundle"):
        self.bundle_key = bundle_key
        self._entities: List[Entity] = list(entities or [])
        self.queries: List[Dict[str, Any]] = []

    def add(self, entity: Entity) -> None:
        self._entities.append(entity)

    def load_by_properties(self, properties: Dict[str, Any]) -> List[Entity]:
        self.queries.append(dict(properties))
        return [entity for entity in self._entities if self._matches(entity, properties)]

    def _matches(self, entity: Entity, properties: Dict[str, Any]) -> bool:
        for key, expected in properties.items():
            actual = entity.bundle if key == self.bundle_key else getattr(entity, key, None)
            if actual != expected:
                return False
        return True

    def __len__(self) -> int:
        return len(self._entities)


class MemoryStorageProvider(StorageProvider):
    def __init__(self, storages: Optional[Dict[str, EntityStorage]] = None):
        self._storages: Dict[str, EntityStorage] = dict(storages or {})

    def register(self, entity_type: str, storage: EntityStorage) -> None:
        self._storages[entity_type] = storage

    def get_storage(self, entity_type: str) -> EntityStorage:
        if entity_type not in self._storages:
            raise EntityTypeNotFound(entity_type)
        return self._storages[entity_type]


# ============================================================================
# Schema
# ============================================================================


class MemoryBundleRegistry(BundleRegistry):
    def __init__(self, bundles: Optional[List[Bundle]] = None):
        self._bundles: Dict[str, Bundle] = {bundle.id: bundle for bundle in bundles or []}

    def add(self, bundle: Bundle) -> None:
        self._bundles[bundle.id] = bundle

    def load(self, bundle_id: str) -> Optional[Bundle]:
        return self._bundles.get(bundle_id)


class MemorySchemaRegistry(SchemaRegistry):
    """Field definitions keyed by (entity type, bundle id)."""

    def __init__(self):
        self._fields: Dict[tuple, List[FieldDefinition]] = {}

    def define(self, entity_type: str, bundle_id: str, definitions: List[FieldDefinition]) -> None:
        self._fields[(entity_type, bundle_id)] = list(definitions)

    def get_field_definitions(self, entity_type: str, bundle_id: str) -> List[FieldDefinition]:
        return list(self._fields.get((entity_type, bundle_id), []))


# ============================================================================
# Request Context
# ============================================================================


class StaticLanguageContext(LanguageContext):
    def __init__(self, langcode: str = "en"):
        self.langcode = langcode

    def get_current_language(self) -> str:
        return self.langcode


@dataclass
class MemoryAccount(Account):
    name: str
    permissions: Set[str] = field(default_factory=set)

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


ANONYMOUS = MemoryAccount(name="anonymous")


class StaticUserContext(UserContext):
    def __init__(self, user: Optional[Account] = None):
        self.user = user or ANONYMOUS

    def current_user(self) -> Account:
        return self.user


class SystemClock(Clock):
    def now(self) -> float:
        return time.time()


class FrozenClock(Clock):
    """A clock that only moves when told to."""

    def __init__(self, timestamp: float = 0.0):
        self.timestamp = timestamp

    def now(self) -> float:
        return self.timestamp

    def advance(self, seconds: float) -> None:
        self.timestamp += seconds


def reference(target_id: Any) -> FieldValues:
    """Values of a single-valued reference field."""
    return FieldValues(main_property="target_id", items=[{"target_id": target_id}])


def text(value: str) -> FieldValues:
    """Values of a single-valued plain field."""
    return FieldValues(main_property="value", items=[{"value": value}])
