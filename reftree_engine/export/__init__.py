from .writer import TreeFormat, dump_tree, serialize_tree, write_tree

__all__ = [
    "TreeFormat",
    "dump_tree",
    "serialize_tree",
    "write_tree",
]
