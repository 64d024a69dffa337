"""
Core models for the entity reference tree engine.

Schema records are plain dataclasses; everything that leaves the engine
(tree nodes, widget nodes, cache entries) is a pydantic model.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Union
from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Identifiers
# ============================================================================

EntityId = Union[int, str]

# Parent of the bundle root node
ROOT_PARENT = "#"

# Bundle selector meaning "all bundles, no filtering"
WILDCARD_BUNDLE = "*"

# Sub-property that marks a reference field
TARGET_ID = "target_id"


def coerce_entity_id(value: Any) -> EntityId:
    """Coerce a raw id value to the native id type (int where possible)."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.lstrip("-").isdigit():
        return int(text)
    return text


# ============================================================================
# Schema Models
# ============================================================================


@dataclass(frozen=True)
class FieldDefinition:
    """One attribute slot on a bundle."""

    name: str
    base: bool = False
    label: Optional[str] = None

    @property
    def is_custom(self) -> bool:
        return not self.base


@dataclass
class Bundle:
    """A named schema grouping entities of one kind."""

    id: str
    label: str
    entity_type: str = "entity"
    cache_tags: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.cache_tags:
            self.cache_tags = [f"{self.entity_type}_bundle:{self.id}"]


# ============================================================================
# Entity Values
# ============================================================================


class FieldValues(BaseModel):
    """All stored values of one field on one entity.

    ``items`` holds one property record per delta (multi-valued fields have
    several). ``main_property`` names the primary scalar of each record,
    e.g. ``target_id`` for reference fields.
    """

    model_config = ConfigDict(extra="forbid")

    main_property: Optional[str] = None
    items: List[Dict[str, Any]] = Field(default_factory=list)

    def first(self, sub_property: str) -> Optional[Any]:
        """Value of ``sub_property`` on the first property record, if any."""
        if not self.items:
            return None
        return self.items[0].get(sub_property)

    @property
    def is_reference(self) -> bool:
        return self.main_property == TARGET_ID


# Field name -> stored values
ValueMap = Dict[str, FieldValues]


# ============================================================================
# Output Models
# ============================================================================


class TreeNode(BaseModel):
    """Flat tree node: the bundle root or one entity."""

    model_config = ConfigDict(populate_by_name=True)

    id: EntityId
    parent: EntityId
    text: str
    is_bundle: Optional[bool] = Field(default=None, alias="isBundle")

    @property
    def is_root(self) -> bool:
        return self.parent == ROOT_PARENT

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the widget's key names, omitting ``isBundle`` on entities."""
        return self.model_dump(by_alias=True, exclude_none=True)


class NodeState(BaseModel):
    """Initial widget state of a node"""

    selected: bool = False


class WidgetNode(BaseModel):
    """Node shape consumed by the tree widget"""

    id: EntityId
    parent: EntityId
    text: str
    state: NodeState = Field(default_factory=NodeState)
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class CacheEntry(BaseModel):
    """A cached node list with its absolute expiry and invalidation tags."""

    data: List[TreeNode]
    expire: float
    tags: List[str] = Field(default_factory=list)
