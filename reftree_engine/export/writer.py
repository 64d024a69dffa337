import json
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Optional

from reftree_engine.models import EntityId, TreeNode
from reftree_engine.tree.nesting import nest_tree, render_outline
from reftree_engine.tree.node_mapper import create_tree_nodes


class TreeFormat(str, Enum):
    """Output formats of a tree"""

    nodes = "nodes"
    widget = "widget"
    nested = "nested"
    outline = "outline"


def serialize_tree(
    nodes: List[TreeNode],
    fmt: TreeFormat = TreeFormat.nodes,
    selected: Optional[Iterable[EntityId]] = None,
) -> Any:
    """Convert a node list into the JSON-ready structure of a format."""
    fmt = TreeFormat(fmt)
    if fmt == TreeFormat.widget:
        return [node.to_dict() for node in create_tree_nodes(nodes, selected)]
    if fmt == TreeFormat.nested:
        return nest_tree(nodes)
    if fmt == TreeFormat.outline:
        return render_outline(nodes)
    return [node.to_dict() for node in nodes]


def dump_tree(
    nodes: List[TreeNode],
    fmt: TreeFormat = TreeFormat.nodes,
    selected: Optional[Iterable[EntityId]] = None,
) -> str:
    """Render a node list as text: JSON, or an indented outline."""
    payload = serialize_tree(nodes, fmt, selected)
    if TreeFormat(fmt) == TreeFormat.outline:
        return payload
    return json.dumps(payload, indent=2, ensure_ascii=False)


def write_tree(
    nodes: List[TreeNode],
    output_path: Path,
    fmt: TreeFormat = TreeFormat.nodes,
    selected: Optional[Iterable[EntityId]] = None,
) -> Path:
    """Write a tree to a file, creating parent directories."""
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(dump_tree(nodes, fmt, selected))
        f.write("\n")

    return output_path
