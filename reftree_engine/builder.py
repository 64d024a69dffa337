"""
Entity reference tree builder.

Entry point of the engine: loads a bundle's entities, infers their
hierarchy and returns the flat node list a tree widget renders, cached per
bundle and language.
"""

from typing import Iterable, List, Optional, Tuple

from loguru import logger

from reftree_engine.access import AccessGuard
from reftree_engine.cache.tree_cache import TreeCache, build_cache_key, merge_tags
from reftree_engine.hierarchy.integrity import break_cycles, reattach_orphans
from reftree_engine.hierarchy.resolution_strategy import ParentFieldResolver, get_parent_resolver
from reftree_engine.interfaces import (
    Account,
    BundleRegistry,
    CacheBackend,
    Clock,
    LanguageContext,
    SchemaRegistry,
    StorageProvider,
    UserContext,
)
from reftree_engine.models import WILDCARD_BUNDLE, EntityId, TreeNode, WidgetNode
from reftree_engine.schema.resolver import SchemaResolver
from reftree_engine.settings import TreeSettings
from reftree_engine.tree.assembler import TreeAssembler
from reftree_engine.tree.node_mapper import create_tree_node, get_node_id


class EntityReferenceTreeBuilder:
    """Builds cached entity reference trees for one site.

    Every collaborator is injected; nothing is looked up globally.
    """

    def __init__(
        self,
        storage_provider: StorageProvider,
        bundle_registry: BundleRegistry,
        schema_registry: SchemaRegistry,
        cache_backend: CacheBackend,
        language_context: LanguageContext,
        user_context: UserContext,
        clock: Clock,
        settings: Optional[TreeSettings] = None,
        parent_resolver: Optional[ParentFieldResolver] = None,
    ):
        """
        Initialize the builder.

        Args:
            storage_provider: Entity storage per entity type
            bundle_registry: Bundle lookup
            schema_registry: Field definitions per bundle
            cache_backend: Where assembled trees are cached
            language_context: Current request language
            user_context: Current user
            clock: Time source for cache expiry
            settings: Tree settings (defaults apply when omitted)
            parent_resolver: Parent field strategy; derived from settings when omitted
        """
        self.settings = settings or TreeSettings()
        self.storage_provider = storage_provider
        self.language_context = language_context
        self.schema_resolver = SchemaResolver(bundle_registry, schema_registry)
        self.access_guard = AccessGuard(user_context, self.settings.access_permission)
        self.assembler = TreeAssembler(parent_resolver or get_parent_resolver(self.settings.parent_field))
        self.cache = TreeCache(cache_backend, clock, ttl=self.settings.cache_ttl)

    def load_tree(
        self,
        entity_type: str,
        bundle_id: str,
        langcode: Optional[str] = None,
        parent: int = 0,
        max_depth: Optional[int] = None,
    ) -> List[TreeNode]:
        """
        Load the tree of all entities in a bundle.

        Args:
            entity_type: The type of the entity
            bundle_id: The bundle ID
            langcode: Label language; the current language when omitted
            parent: Accepted for compatibility with taxonomy trees, unused
            max_depth: Accepted for compatibility with taxonomy trees, unused

        Returns:
            Ordered node list, bundle root first; empty for the wildcard
            bundle or when the current user may not see trees

        Raises:
            BundleNotFound: If the bundle does not exist
            EntityTypeNotFound: If the entity type has no storage
        """
        if bundle_id == WILDCARD_BUNDLE:
            logger.warning(f"Cannot build a {entity_type} tree across all bundles ('{WILDCARD_BUNDLE}')")
            return []

        if not self.has_access():
            user = self.access_guard.resolve_user()
            logger.warning(
                f"User {user.name} lacks permission '{self.settings.access_permission}' "
                f"for the tree of bundle {bundle_id}"
            )
            return []

        # Resolve before keying so the key reflects the language used
        langcode = langcode or self.language_context.get_current_language()
        key = build_cache_key(self.settings.cache_prefix, bundle_id, langcode)

        return self.cache.get_or_build(key, lambda: self.build_tree(entity_type, bundle_id, langcode))

    def build_tree(self, entity_type: str, bundle_id: str, langcode: Optional[str]) -> Tuple[List[TreeNode], List[str]]:
        """Build a tree without the cache.

        Returns:
            Tuple of (nodes, cache tags of the bundle and every included entity)
        """
        bundle, custom_fields = self.schema_resolver.resolve(entity_type, bundle_id)
        storage = self.storage_provider.get_storage(entity_type)
        entities = storage.load_by_properties({storage.bundle_key: bundle.id})

        assembled = self.assembler.assemble(bundle, entities, custom_fields, storage, langcode)
        nodes = assembled.nodes
        if self.settings.reattach_orphans:
            nodes = reattach_orphans(nodes, bundle.id)
        if self.settings.break_cycles:
            nodes = break_cycles(nodes, bundle.id)

        tags = merge_tags(bundle.cache_tags, *(entity.cache_tags for entity in assembled.entities))
        logger.info(
            f"Built tree for {entity_type} bundle {bundle.id} ({langcode}): {len(nodes)} nodes, "
            f"{assembled.skipped_access} not viewable, {assembled.skipped_incomplete} incomplete"
        )
        return nodes, tags

    def has_access(self, user: Optional[Account] = None) -> bool:
        """Check if a user (the current user by default) may access trees."""
        return self.access_guard.has_access(user)

    def create_tree_node(self, node: TreeNode, selected: Optional[Iterable[EntityId]] = None) -> WidgetNode:
        return create_tree_node(node, selected)

    def get_node_id(self, node: TreeNode) -> EntityId:
        return get_node_id(node)

    def invalidate(self, tags: Iterable[str]) -> None:
        """Drop cached trees carrying any of the tags."""
        self.cache.invalidate(tags)
