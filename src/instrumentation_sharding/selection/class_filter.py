"""
User-supplied inclusion filter for discovered test classes.

A filter is a comma-separated list of patterns. A pattern selects a class when
it equals the class name, or when it matches as a regular expression. Patterns
without the '.*' wildcard are matched anywhere in the name:

    'com.example.LoginTest'   -> exactly that class (and any name containing it)
    'LoginTest'               -> '.*LoginTest.*'
    'com.example.*Smoke.*'    -> used as-is
"""

import logging
import re
from typing import Dict, List, Optional, Sequence

from ..models import TestClass

logger = logging.getLogger(__name__)

WILDCARD = '.*'


def split_patterns(filter_patterns: Optional[str]) -> List[str]:
    """Split a comma-separated filter, dropping blank entries."""
    if not filter_patterns:
        return []
    return [p.strip() for p in filter_patterns.split(',') if p.strip()]


def pattern_regex(pattern: str) -> str:
    """Regex source for a pattern: used directly if it has a wildcard, else matched anywhere."""
    if WILDCARD in pattern:
        return pattern
    return WILDCARD + pattern + WILDCARD


class TestClassFilter:
    """
    Keeps test classes matching at least one user pattern.

    Example:
        flt = TestClassFilter('LoginTest,com.example.*Smoke.*')
        selected = flt.apply(discovered)
    """

    __test__ = False  # not a pytest test class

    def __init__(self, filter_patterns: Optional[str]):
        self.filter_patterns = filter_patterns
        self.patterns = split_patterns(filter_patterns)

    @property
    def active(self) -> bool:
        return bool(self.patterns)

    def _matcher(self, pattern: str):
        try:
            regex = re.compile(pattern_regex(pattern))
        except re.error as e:
            logger.warning("Filter %r is not a valid pattern (%s); matching it literally", pattern, e)
            return lambda name: name == pattern
        return lambda name: name == pattern or regex.fullmatch(name) is not None

    def apply(self, test_classes: Sequence[TestClass]) -> Sequence[TestClass]:
        """
        Select the classes matching any pattern.

        Without patterns the input is returned unchanged. Patterns that match
        nothing are reported in a single log line; they never fail the run.

        Args:
            test_classes: Discovered test classes

        Returns:
            Matching classes, one per class name (order not significant)
        """
        if not self.active:
            return test_classes

        filtered_in: Dict[str, TestClass] = {}
        unmatched = []
        for pattern in self.patterns:
            matches = self._matcher(pattern)
            matched = False
            for test_class in test_classes:
                if matches(test_class.class_name):
                    filtered_in.setdefault(test_class.class_name, test_class)
                    matched = True
            if not matched:
                unmatched.append(pattern)

        if unmatched:
            logger.info("Filters specified but did not match any classes: %s", ", ".join(unmatched))

        return list(filtered_in.values())


def filter_test_classes(
    test_classes: Sequence[TestClass],
    filter_patterns: Optional[str],
) -> Sequence[TestClass]:
    """Apply a comma-separated filter to discovered test classes."""
    return TestClassFilter(filter_patterns).apply(test_classes)
