from .assembler import AssembledTree, TreeAssembler
from .node_mapper import create_tree_node, create_tree_nodes, get_node_id
from .nesting import nest_tree, render_outline

__all__ = [
    "AssembledTree",
    "TreeAssembler",
    "create_tree_node",
    "create_tree_nodes",
    "get_node_id",
    "nest_tree",
    "render_outline",
]
