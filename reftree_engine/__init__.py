"""Entity reference tree engine - infers bundle hierarchies and assembles widget trees."""

from .builder import EntityReferenceTreeBuilder
from .errors import BundleNotFound, ConfigError, EntityTypeNotFound, SiteDocumentError, TreeBuildError
from .models import Bundle, FieldDefinition, FieldValues, TreeNode, WidgetNode
from .settings import TreeSettings

__version__ = "1.0.0"

__all__ = [
    "EntityReferenceTreeBuilder",
    "TreeSettings",
    "Bundle",
    "FieldDefinition",
    "FieldValues",
    "TreeNode",
    "WidgetNode",
    "TreeBuildError",
    "BundleNotFound",
    "EntityTypeNotFound",
    "SiteDocumentError",
    "ConfigError",
]
