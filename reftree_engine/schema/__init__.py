from .resolver import SchemaResolver

__all__ = [
    "SchemaResolver",
]
