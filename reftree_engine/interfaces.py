from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from reftree_engine.models import Bundle, CacheEntry, EntityId, FieldDefinition, TreeNode, ValueMap


class Entity(ABC):
    """
    Interface for one stored record belonging to a bundle.
    """

    @property
    @abstractmethod
    def id(self) -> EntityId:
        pass

    @property
    @abstractmethod
    def bundle(self) -> str:
        pass

    @property
    def cache_tags(self) -> List[str]:
        return [f"entity:{self.id}"]

    @abstractmethod
    def label(self) -> str:
        """Default display label."""
        pass

    @abstractmethod
    def access(self, operation: str) -> bool:
        """Whether the current user may perform ``operation`` on this entity."""
        pass

    @abstractmethod
    def has_translation(self, langcode: str) -> bool:
        pass

    @abstractmethod
    def get_translation(self, langcode: str) -> "Entity":
        pass

    @abstractmethod
    def get_values(self, storage: "EntityStorage") -> ValueMap:
        """
        Stored field values keyed by field name.

        Args:
            storage: The storage the entity was loaded from
        """
        pass


class EntityStorage(ABC):
    """
    Interface for the query side of an entity type's storage.
    """

    # Name of the property holding an entity's bundle id
    bundle_key: str

    @abstractmethod
    def load_by_properties(self, properties: Dict[str, Any]) -> List[Entity]:
        """Load all entities matching every property, in storage order."""
        pass


class StorageProvider(ABC):
    @abstractmethod
    def get_storage(self, entity_type: str) -> EntityStorage:
        """
        Get the storage for an entity type.

        Raises:
            EntityTypeNotFound: If the entity type has no storage
        """
        pass


class SchemaRegistry(ABC):
    @abstractmethod
    def get_field_definitions(self, entity_type: str, bundle_id: str) -> List[FieldDefinition]:
        """Field definitions of a bundle in declaration order."""
        pass


class BundleRegistry(ABC):
    @abstractmethod
    def load(self, bundle_id: str) -> Optional[Bundle]:
        pass


class CacheBackend(ABC):
    """
    Interface for the cache storing assembled trees.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key``, or None if absent, expired or invalidated."""
        pass

    @abstractmethod
    def set(self, key: str, data: List[TreeNode], expire: float, tags: List[str]) -> None:
        pass

    @abstractmethod
    def invalidate_tags(self, tags: List[str]) -> None:
        """Drop every entry carrying one of ``tags``."""
        pass


class LanguageContext(ABC):
    @abstractmethod
    def get_current_language(self) -> str:
        pass


class Account(ABC):
    name: str

    @abstractmethod
    def has_permission(self, permission: str) -> bool:
        pass


class UserContext(ABC):
    @abstractmethod
    def current_user(self) -> Account:
        pass


class Clock(ABC):
    @abstractmethod
    def now(self) -> float:
        """Current time as a unix timestamp."""
        pass
