"""Test class selection: user filters and node sharding."""

from .class_filter import TestClassFilter, filter_test_classes
from .sharding import filter_by_node_index, partition_all, shard_test_classes

__all__ = [
    'TestClassFilter',
    'filter_test_classes',
    'filter_by_node_index',
    'partition_all',
    'shard_test_classes',
]
