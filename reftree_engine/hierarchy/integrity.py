"""Integrity guards applied to an assembled node list.

Inferred parents may point at entities missing from the result set (not
viewable, not a complete member of the bundle, or stored in another
bundle), and nothing in the stored data prevents parent cycles. Both
would leave the tree widget with nodes it cannot place.
"""

from typing import Dict, List

from loguru import logger

from reftree_engine.models import EntityId, TreeNode


def _key(node_id: EntityId) -> str:
    # Stored ids and reference values may differ in type ("2" vs 2)
    return str(node_id)


def _reparent(node: TreeNode, parent: EntityId) -> TreeNode:
    return node.model_copy(update={"parent": parent})


def reattach_orphans(nodes: List[TreeNode], bundle_id: str) -> List[TreeNode]:
    """Attach nodes whose parent is not in the list directly under the bundle root.

    Args:
        nodes: Assembled nodes, root first
        bundle_id: ID of the bundle root node

    Returns:
        New node list in the same order
    """
    present = {_key(node.id) for node in nodes}
    result: List[TreeNode] = []
    for node in nodes:
        if node.is_root or _key(node.parent) == _key(bundle_id) or _key(node.parent) in present:
            result.append(node)
            continue
        logger.debug(f"Parent {node.parent} of {node.id} is not in bundle {bundle_id}, attaching to root")
        result.append(_reparent(node, bundle_id))
    return result


def find_cycles(nodes: List[TreeNode]) -> List[List[EntityId]]:
    """Find parent cycles among the nodes.

    Each cycle is returned once, starting at the member that comes first
    in ``nodes`` and following parent links from there.
    """
    parents: Dict[str, str] = {}
    by_key: Dict[str, TreeNode] = {}
    position: Dict[str, int] = {}
    for index, node in enumerate(nodes):
        if node.is_root:
            continue
        key = _key(node.id)
        parents[key] = _key(node.parent)
        by_key[key] = node
        position[key] = index

    # 0 = unvisited, 1 = on current path, 2 = done
    state: Dict[str, int] = {key: 0 for key in parents}
    cycles: List[List[EntityId]] = []

    for start in parents:
        if state[start]:
            continue
        path: List[str] = []
        current = start
        while current in parents and state[current] == 0:
            state[current] = 1
            path.append(current)
            current = parents[current]

        if current in parents and state[current] == 1:
            members = path[path.index(current):]
            first = min(members, key=lambda k: position[k])
            ordered = members[members.index(first):] + members[: members.index(first)]
            cycles.append([by_key[k].id for k in ordered])

        for key in path:
            state[key] = 2

    return cycles


def break_cycles(nodes: List[TreeNode], bundle_id: str) -> List[TreeNode]:
    """Attach the first member of every parent cycle to the bundle root.

    Args:
        nodes: Assembled nodes, root first
        bundle_id: ID of the bundle root node

    Returns:
        New node list in the same order
    """
    cycles = find_cycles(nodes)
    if not cycles:
        return nodes

    breaks = set()
    for cycle in cycles:
        logger.warning(
            f"Parent cycle in bundle {bundle_id}: {' -> '.join(str(i) for i in cycle)}; "
            f"attaching {cycle[0]} to the root"
        )
        breaks.add(_key(cycle[0]))

    return [_reparent(node, bundle_id) if _key(node.id) in breaks else node for node in nodes]
