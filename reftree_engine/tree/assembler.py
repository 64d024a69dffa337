"""Tree assembly - turns a bundle's flat entities into an ordered node list."""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from loguru import logger

from reftree_engine.hierarchy.resolution_strategy import NO_PARENT, FirstReferenceFieldResolver, ParentFieldResolver
from reftree_engine.interfaces import Entity, EntityStorage
from reftree_engine.models import ROOT_PARENT, Bundle, TreeNode, ValueMap


@dataclass
class AssembledTree:
    """Result of one assembly: the nodes plus the entities they came from."""

    nodes: List[TreeNode] = field(default_factory=list)
    entities: List[Entity] = field(default_factory=list)
    skipped_access: int = 0
    skipped_incomplete: int = 0


class TreeAssembler:
    """Builds the flat node list of one bundle.

    The root node comes first, followed by one node per viewable entity
    in storage order. An entity's parent is inferred by the injected
    ParentFieldResolver; entities without a parent hang off the bundle
    root.
    """

    def __init__(self, parent_resolver: Optional[ParentFieldResolver] = None):
        self.parent_resolver = parent_resolver or FirstReferenceFieldResolver()

    @staticmethod
    def root_node(bundle: Bundle) -> TreeNode:
        return TreeNode(id=bundle.id, parent=ROOT_PARENT, text=bundle.label, is_bundle=True)

    @staticmethod
    def is_member(values: ValueMap, custom_fields: List[str]) -> bool:
        """Whether any of the bundle's custom fields is stored on the entity.

        Entities storing none of them are not complete members of the
        bundle's schema and are left out of the tree.
        """
        return any(name in values for name in custom_fields)

    @staticmethod
    def display_label(entity: Entity, langcode: Optional[str]) -> str:
        """Label in the requested language, falling back to the entity's own."""
        if langcode and entity.has_translation(langcode):
            return entity.get_translation(langcode).label()
        return entity.label()

    def assemble(
        self,
        bundle: Bundle,
        entities: Iterable[Entity],
        custom_fields: List[str],
        storage: EntityStorage,
        langcode: Optional[str] = None,
    ) -> AssembledTree:
        """Assemble the node list.

        Args:
            bundle: The bundle being rendered
            entities: The bundle's entities in storage order
            custom_fields: Custom field names in declaration order
            storage: Storage the entities came from
            langcode: Language of the node labels

        Returns:
            AssembledTree with the root node first
        """
        result = AssembledTree(nodes=[self.root_node(bundle)])

        for entity in entities:
            if not entity.access("view"):
                result.skipped_access += 1
                logger.debug(f"No view access to {entity.id}, skipping")
                continue

            values = entity.get_values(storage)
            if not self.is_member(values, custom_fields):
                result.skipped_incomplete += 1
                logger.debug(f"Entity {entity.id} stores none of the custom fields of {bundle.id}, skipping")
                continue

            text = self.display_label(entity, langcode)
            parent_id = self.parent_resolver.resolve_parent(values, custom_fields)

            # Top-level entities point at the bundle, not at "#"
            if parent_id == NO_PARENT:
                parent_id = bundle.id

            result.nodes.append(TreeNode(id=entity.id, parent=parent_id, text=text))
            result.entities.append(entity)

        return result
