"""Hierarchy inference for flat-stored entities."""

from .resolution_strategy import (
    NO_PARENT,
    FirstReferenceFieldResolver,
    NamedFieldResolver,
    ParentFieldResolver,
    get_parent_resolver,
)
from .integrity import break_cycles, find_cycles, reattach_orphans

__all__ = [
    "NO_PARENT",
    "ParentFieldResolver",
    "FirstReferenceFieldResolver",
    "NamedFieldResolver",
    "get_parent_resolver",
    "find_cycles",
    "break_cycles",
    "reattach_orphans",
]
