"""Schema resolution: which fields of a bundle are custom (non-base) fields."""

from typing import List, Tuple

from loguru import logger

from reftree_engine.errors import BundleNotFound
from reftree_engine.interfaces import BundleRegistry, SchemaRegistry
from reftree_engine.models import Bundle


class SchemaResolver:
    """Resolves bundles and their custom field names.

    Custom field names are opaque generated identifiers, so nothing here
    relies on their spelling. Declaration order is kept as the registry
    returns it because it is the tie-break for parent inference.
    """

    def __init__(self, bundle_registry: BundleRegistry, schema_registry: SchemaRegistry):
        self.bundle_registry = bundle_registry
        self.schema_registry = schema_registry

    def load_bundle(self, bundle_id: str) -> Bundle:
        """Load a bundle.

        Raises:
            BundleNotFound: If the registry has no such bundle
        """
        bundle = self.bundle_registry.load(bundle_id)
        if bundle is None:
            raise BundleNotFound(bundle_id)
        return bundle

    def resolve(self, entity_type: str, bundle_id: str) -> Tuple[Bundle, List[str]]:
        """Load a bundle together with its ordered custom field names.

        Args:
            entity_type: Entity type the bundle belongs to
            bundle_id: The bundle ID

        Returns:
            Tuple of (bundle, field names in schema-declaration order)

        Raises:
            BundleNotFound: If the registry has no such bundle
        """
        bundle = self.load_bundle(bundle_id)
        definitions = self.schema_registry.get_field_definitions(entity_type, bundle.id)
        names = [definition.name for definition in definitions if definition.is_custom]
        logger.debug(f"Bundle {bundle.id}: {len(names)} custom fields of {len(definitions)}")
        return bundle, names

    def custom_field_names(self, entity_type: str, bundle_id: str) -> List[str]:
        """Ordered names of the bundle's non-base fields."""
        return self.resolve(entity_type, bundle_id)[1]
