"""
Forest traversal and structure checks.

Traversals are iterative and guard against a node reappearing on its own
ancestor path, which only happens when duplicate ids link a node under one
of its descendants.
"""

from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from plansync.app.models.hierarchy_models import HierarchyNode


def iter_nodes_with_depth(roots: Sequence[HierarchyNode]) -> Iterator[Tuple[HierarchyNode, int]]:
    """Yield (node, depth) depth-first, pre-order; roots have depth 1."""
    on_path: set = set()
    stack: List[Tuple[HierarchyNode, int, Iterator[HierarchyNode]]] = []

    for root in roots:
        yield root, 1
        on_path.add(id(root))
        stack.append((root, 1, iter(root.children)))

        while stack:
            node, depth, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                on_path.discard(id(node))
                continue
            if id(child) in on_path:
                continue
            yield child, depth + 1
            on_path.add(id(child))
            stack.append((child, depth + 1, iter(child.children)))


def iter_nodes(roots: Sequence[HierarchyNode]) -> Iterator[HierarchyNode]:
    """Yield every node in the forest depth-first, pre-order."""
    for node, _ in iter_nodes_with_depth(roots):
        yield node


def count_nodes(roots: Sequence[HierarchyNode]) -> int:
    """Total number of nodes in the forest, counted through `children`."""
    return sum(1 for _ in iter_nodes(roots))


def max_depth(roots: Sequence[HierarchyNode]) -> int:
    """Depth of the deepest node (0 for an empty forest)."""
    return max((depth for _, depth in iter_nodes_with_depth(roots)), default=0)


def find_node(
    roots: Sequence[HierarchyNode],
    entity_id: Any,
    id_field: str = "id",
) -> Optional[HierarchyNode]:
    """Return the first node (pre-order) whose `id_field` equals entity_id."""
    for node in iter_nodes(roots):
        if node.get(id_field) == entity_id:
            return node
    return None


def forest_to_dicts(roots: Sequence[HierarchyNode]) -> List[Dict[str, Any]]:
    """
    Serialize a forest to plain nested dicts.

    A child that already sits on its own ancestor path is left out.
    """
    def shell(node: HierarchyNode) -> Dict[str, Any]:
        data = dict(node.__pydantic_extra__ or {})
        data["expanded"] = node.expanded
        data["children"] = []
        return data

    result: List[Dict[str, Any]] = []
    for root in roots:
        root_dict = shell(root)
        result.append(root_dict)
        on_path = {id(root)}
        stack: List[Tuple[HierarchyNode, Dict[str, Any], Iterator[HierarchyNode]]] = [
            (root, root_dict, iter(root.children))
        ]
        while stack:
            node, node_dict, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                on_path.discard(id(node))
                continue
            if id(child) in on_path:
                continue
            child_dict = shell(child)
            node_dict["children"].append(child_dict)
            on_path.add(id(child))
            stack.append((child, child_dict, iter(child.children)))
    return result


def detect_cycles(
    entities: Iterable[Any],
    get_id: Callable[[Any], Any],
    get_parent: Callable[[Any], Any],
) -> List[List[str]]:
    """
    Find parent-pointer cycles among entities.

    Each cycle is reported once, as the list of ids along the parent chain
    starting from the first id of the cycle met in input order.
    """
    parents: Dict[Any, Any] = {}
    order: List[Any] = []
    for entity in entities:
        entity_id = get_id(entity)
        if entity_id not in parents:
            order.append(entity_id)
        parents[entity_id] = get_parent(entity)

    cycles: List[List[str]] = []
    # 0 = unvisited, 1 = on current walk, 2 = done
    state: Dict[Any, int] = {}

    for start in order:
        if state.get(start):
            continue
        walk: List[Any] = []
        current = start
        while current is not None and current in parents and not state.get(current):
            state[current] = 1
            walk.append(current)
            current = parents[current]

        if current is not None and state.get(current) == 1:
            cycle = walk[walk.index(current):]
            cycles.append([str(entity_id) for entity_id in cycle])

        for entity_id in walk:
            state[entity_id] = 2

    return cycles
