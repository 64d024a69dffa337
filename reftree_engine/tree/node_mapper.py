"""Tree node mapper for creating widget nodes from flat tree nodes."""

from typing import Iterable, List, Optional, Sequence

from reftree_engine.models import EntityId, NodeState, TreeNode, WidgetNode


def get_node_id(node: TreeNode) -> EntityId:
    """Get the ID of a tree node."""
    return node.id


def create_tree_node(node: TreeNode, selected: Optional[Iterable[EntityId]] = None) -> WidgetNode:
    """Create the widget node for a tree node.

    Example: TreeNode(id=2, parent=1, text="South Africa") with selected=[2]
    -> {"id": 2, "parent": 1, "text": "South Africa", "state": {"selected": true}}

    Args:
        node: The flat tree node
        selected: IDs of initially selected nodes; "2" and 2 both select node 2

    Returns:
        WidgetNode; bundle roots carry ``data = {"isBundle": True}``
    """
    selected_keys = {str(node_id) for node_id in (selected or [])}

    widget_node = WidgetNode(
        id=node.id,
        parent=node.parent,
        text=node.text,
        state=NodeState(selected=str(node.id) in selected_keys),
    )
    if node.is_bundle:
        widget_node.data = {"isBundle": True}

    return widget_node


def create_tree_nodes(nodes: Sequence[TreeNode], selected: Optional[Iterable[EntityId]] = None) -> List[WidgetNode]:
    """Map a whole node list, keeping its order."""
    selected = list(selected or [])
    return [create_tree_node(node, selected) for node in nodes]
