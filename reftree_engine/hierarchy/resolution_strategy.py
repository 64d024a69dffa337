"""Parent field resolution strategies.

The hierarchy of a bundle is not stored explicitly. One of the bundle's
custom fields is a self-reference to another entity of the same bundle,
and its name is a generated token that differs from bundle to bundle.
A ParentFieldResolver decides which field plays that role for a given
entity and reads the parent id from it.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from loguru import logger

from reftree_engine.models import EntityId, FieldValues, TARGET_ID, ValueMap, coerce_entity_id

# Sentinel for "no parent"
NO_PARENT = 0


class ParentFieldResolver(ABC):
    """Base strategy for inferring an entity's parent from its values."""

    @abstractmethod
    def find_parent_field(self, values: ValueMap, custom_fields: List[str]) -> Optional[str]:
        """Name of the field holding the parent reference, or None.

        Args:
            values: The entity's stored values
            custom_fields: The bundle's custom field names in declaration order
        """
        pass

    def resolve_parent(self, values: ValueMap, custom_fields: List[str]) -> EntityId:
        """Infer the parent id of one entity.

        Args:
            values: The entity's stored values
            custom_fields: The bundle's custom field names in declaration order

        Returns:
            The parent entity id, or NO_PARENT if none resolves
        """
        field_name = self.find_parent_field(values, custom_fields)
        if field_name is None:
            return NO_PARENT
        return self.read_target_id(values[field_name])

    @staticmethod
    def read_target_id(field_values: FieldValues) -> EntityId:
        """Parent id from the first property record of a reference field."""
        raw = field_values.first(TARGET_ID)
        if raw is None or raw == "":
            return NO_PARENT
        return coerce_entity_id(raw)


class FirstReferenceFieldResolver(ParentFieldResolver):
    """Picks the first custom field, in declaration order, that is a reference.

    A field qualifies when its ``main_property`` is ``target_id``. Detecting
    the parent field by type instead of by name is the only rule that works
    across bundles. If a bundle has two reference fields the earlier one
    wins, even when it holds no target id; use NamedFieldResolver for such
    bundles.
    """

    def find_parent_field(self, values: ValueMap, custom_fields: List[str]) -> Optional[str]:
        for field_name in custom_fields:
            field_values = values.get(field_name)
            if field_values is None:
                continue
            if field_values.main_property is None:
                continue
            if not field_values.is_reference:
                continue
            return field_name
        return None


class NamedFieldResolver(ParentFieldResolver):
    """Reads the parent from one explicitly configured field."""

    def __init__(self, field_name: str):
        self.field_name = field_name

    def find_parent_field(self, values: ValueMap, custom_fields: List[str]) -> Optional[str]:
        if self.field_name not in custom_fields:
            logger.debug(f"Parent field {self.field_name} is not a custom field of this bundle")
            return None
        field_values = values.get(self.field_name)
        if field_values is None or not field_values.is_reference:
            return None
        return self.field_name


def get_parent_resolver(parent_field: Optional[str] = None) -> ParentFieldResolver:
    """Get the resolver for a configured parent field name.

    Args:
        parent_field: Explicit parent field name, or None for the first-match scan
    """
    if parent_field:
        return NamedFieldResolver(parent_field)

    # Default to first reference field
    return FirstReferenceFieldResolver()
