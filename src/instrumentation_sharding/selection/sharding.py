"""
Deterministic sharding of test classes across nodes.

Nodes do not talk to each other. Each one sorts the same class set by name and
keeps every T-th class starting at its own index, so the partitions computed
independently on T nodes are disjoint and together cover the whole set.

    classes A0..A9, T=3:
        node 0 -> A0 A3 A6 A9
        node 1 -> A1 A4 A7
        node 2 -> A2 A5 A8
"""

from typing import List, Sequence

from ..models import TestClass


def validate_node_index(total_nodes: int, node_index: int) -> None:
    """Raise ValueError unless 0 <= node_index < total_nodes."""
    if total_nodes < 1:
        raise ValueError(f"total_nodes must be at least 1, got {total_nodes}")
    if not 0 <= node_index < total_nodes:
        raise ValueError(
            f"node_index must be in [0, {total_nodes - 1}] for {total_nodes} nodes, got {node_index}"
        )


def filter_by_node_index(
    test_classes: Sequence[TestClass],
    total_nodes: int,
    node_index: int,
) -> Sequence[TestClass]:
    """
    Keep the classes at positions i where i % total_nodes == node_index.

    The input must already be in its global order. With a single node the
    input is returned as-is.
    """
    if total_nodes == 1:
        return test_classes
    return [tc for i, tc in enumerate(test_classes) if i % total_nodes == node_index]


def shard_test_classes(
    test_classes: Sequence[TestClass],
    total_nodes: int,
    node_index: int,
) -> Sequence[TestClass]:
    """
    Compute the partition of test classes owned by one node.

    Args:
        test_classes: Filtered test classes in any order
        total_nodes: Number of nodes in the run
        node_index: This node's zero-based index

    Returns:
        This node's classes in ascending name order. With total_nodes == 1
        the input is returned unchanged.
    """
    validate_node_index(total_nodes, node_index)
    if total_nodes == 1:
        return test_classes
    return filter_by_node_index(sorted(test_classes), total_nodes, node_index)


def partition_all(test_classes: Sequence[TestClass], total_nodes: int) -> List[List[TestClass]]:
    """Partitions for every node index, as each node would compute them."""
    validate_node_index(total_nodes, 0)
    ordered = sorted(test_classes)
    return [list(filter_by_node_index(ordered, total_nodes, c)) for c in range(total_nodes)]
