"""
Instrumentation Sharding - test partitioning and work distribution for device test runs.

This package provides tools for:
- Resolving application/test package and runner class from an instrumentation manifest
- Filtering discovered test classes by user-supplied patterns
- Deterministic sharding of test classes across independent nodes
- Thread-safe handout of a node's classes to concurrent device workers
"""

__version__ = "1.0.0"
