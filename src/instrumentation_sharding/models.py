"""
Test class model and class list files.

A class list is the file form of the collection produced by test discovery.

Class List Format:
    One fully-qualified class name per line. Blank lines and lines starting
    with '#' are ignored. A line may name a single method as Class#method;
    repeated lines for the same class merge their methods.

    Examples:
        com.example.LoginTest
        com.example.CheckoutTest#testPayWithCard
        com.example.CheckoutTest#testPayWithVoucher
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Union

logger = logging.getLogger(__name__)

METHOD_SEPARATOR = '#'


@dataclass(frozen=True, order=True)
class TestClass:
    """One discoverable test unit, identified by its class name."""

    __test__ = False  # not a pytest test class

    class_name: str
    methods: FrozenSet[str] = field(default_factory=frozenset, compare=False)

    def __post_init__(self):
        if not self.class_name:
            raise ValueError("TestClass requires a non-empty class name")
        if not isinstance(self.methods, frozenset):
            object.__setattr__(self, 'methods', frozenset(self.methods))

    def __str__(self) -> str:
        return self.class_name


def unique_test_classes(classes: Iterable[TestClass]) -> List[TestClass]:
    """
    Collapse duplicate discoveries into one TestClass per class name.

    Methods reported for the same class are merged. The first occurrence
    fixes the position of a class in the returned list.

    Args:
        classes: Discovered test classes, possibly with duplicates

    Returns:
        List of distinct test classes
    """
    merged: Dict[str, TestClass] = {}
    for test_class in classes:
        seen = merged.get(test_class.class_name)
        if seen is None:
            merged[test_class.class_name] = test_class
        elif not test_class.methods <= seen.methods:
            merged[test_class.class_name] = TestClass(
                seen.class_name, seen.methods | test_class.methods
            )
    return list(merged.values())


def parse_class_line(line: str) -> TestClass:
    """Parse one 'Class' or 'Class#method' entry."""
    class_name, sep, method = line.partition(METHOD_SEPARATOR)
    class_name = class_name.strip()
    method = method.strip()
    if sep and method:
        return TestClass(class_name, frozenset([method]))
    return TestClass(class_name)


def read_class_list(class_list_file: Union[str, Path]) -> List[TestClass]:
    """
    Read test classes from a class list file.

    Args:
        class_list_file: Path to class list file (one class per line)

    Returns:
        Distinct test classes in file order
    """
    class_list_file = Path(class_list_file)
    classes = []
    with open(class_list_file, 'r') as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#'):
                classes.append(parse_class_line(line))
    return unique_test_classes(classes)


def write_class_list(classes: Iterable[TestClass], output_file: Union[str, Path]) -> Path:
    """
    Write test classes to a class list file.

    Classes with methods are written as one Class#method line per method.

    Args:
        classes: Test classes to write
        output_file: Path to output file

    Returns:
        Path to created file
    """
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(output_file, 'w') as f:
        for test_class in classes:
            if test_class.methods:
                for method in sorted(test_class.methods):
                    f.write(f"{test_class.class_name}{METHOD_SEPARATOR}{method}\n")
            else:
                f.write(test_class.class_name + '\n')
            count += 1

    logger.info("Created class list with %d classes: %s", count, output_file)
    return output_file
