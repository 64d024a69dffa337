"""Nested tree builder - turns the flat node list into a nested structure."""

from typing import Any, Dict, List, Set

from loguru import logger

from reftree_engine.models import TreeNode


def nest_tree(nodes: List[TreeNode]) -> Dict[str, Any]:
    """Build a nested tree from a flat node list.

    Creates a structure like:
    {
        "id": "country",
        "text": "Country",
        "isBundle": true,
        "children": [
            {
                "id": 1,
                "text": "Africa",
                "children": [
                    {"id": 2, "text": "South Africa", "children": [...]}
                ]
            }
        ]
    }

    Children keep the order of the flat list. Nodes whose parent is not in
    the list are placed under the root. A parent cycle left in the list is
    cut at its earliest listed member, which moves under the root, so every
    node ends up reachable and the result holds no reference loops.

    Args:
        nodes: Flat node list with the bundle root first

    Returns:
        Nested dictionary rooted at the bundle node, or {} for an empty list
    """
    if not nodes:
        return {}

    root = nodes[0]
    root_key = str(root.id)
    entries: Dict[str, Dict[str, Any]] = {}
    for node in nodes:
        entry: Dict[str, Any] = {"id": node.id, "text": node.text, "children": []}
        if node.is_bundle:
            entry["isBundle"] = True
        entries[str(node.id)] = entry

    parents: Dict[str, str] = {}
    for node in nodes[1:]:
        key = str(node.id)
        parent_key = str(node.parent)
        if parent_key not in entries:
            parent_key = root_key
        parents[key] = parent_key
        entries[parent_key]["children"].append(entries[key])

    order = {str(node.id): index for index, node in enumerate(nodes)}
    reachable = _collect_keys(entries[root_key])
    for node in nodes[1:]:
        if str(node.id) in reachable:
            continue
        cycle = _find_cycle(str(node.id), parents)
        head = min(cycle, key=order.get)
        entry = entries[head]
        siblings = entries[parents[head]]["children"]
        siblings[:] = [child for child in siblings if child is not entry]
        entries[root_key]["children"].append(entry)
        parents[head] = root_key
        logger.warning(
            f"Parent cycle {' -> '.join(cycle)} is unreachable from {root.id}; nesting {head} under the root"
        )
        reachable |= _collect_keys(entry)

    return entries[root_key]


def _collect_keys(entry: Dict[str, Any]) -> Set[str]:
    """Keys of an entry and everything below it."""
    keys: Set[str] = set()
    stack = [entry]
    while stack:
        current = stack.pop()
        key = str(current["id"])
        if key in keys:
            continue
        keys.add(key)
        stack.extend(current["children"])
    return keys


def _find_cycle(start: str, parents: Dict[str, str]) -> List[str]:
    """Follow parent links from start until one repeats; return the loop."""
    path: List[str] = []
    index: Dict[str, int] = {}
    key = start
    while key not in index:
        index[key] = len(path)
        path.append(key)
        key = parents[key]
    return path[index[key]:]


def render_outline(nodes: List[TreeNode], indent: str = "  ") -> str:
    """Render the tree as an indented text outline.

    Example:
        Country
          Africa
            South Africa
              Johannesburg
    """
    lines: List[str] = []

    def walk(entry: Dict[str, Any], depth: int) -> None:
        lines.append(f"{indent * depth}{entry['text']}")
        for child in entry["children"]:
            walk(child, depth + 1)

    tree = nest_tree(nodes)
    if tree:
        walk(tree, 0)
    return "\n".join(lines)
