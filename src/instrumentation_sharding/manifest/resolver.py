"""
Instrumentation field resolution.

Extracts the three identifiers a run needs from manifest tag events:

    <manifest package="com.example.test">           -> test package
        <instrumentation
            android:targetPackage="com.example"     -> application package
            android:name=".MyRunner" />             -> runner class
    </manifest>
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from ..errors import MissingManifestField
from .events import EventKind, ManifestEvent

PACKAGE_SEPARATOR = '.'


@dataclass(frozen=True)
class ManifestFields:
    """Identifiers resolved from an instrumentation manifest."""
    application_package: str
    test_package: str
    runner_class: str


def normalize_runner_class(runner_class: str, test_package: str) -> str:
    """
    Qualify a runner class declared relative to the test package.

    Example:
        >>> normalize_runner_class('.MyRunner', 'com.example.test')
        'com.example.test.MyRunner'
        >>> normalize_runner_class('MyRunner', 'com.example.test')
        'com.example.test.MyRunner'
        >>> normalize_runner_class('com.other.MyRunner', 'com.example.test')
        'com.other.MyRunner'
    """
    if runner_class.startswith(PACKAGE_SEPARATOR):
        return test_package + runner_class
    if PACKAGE_SEPARATOR not in runner_class:
        return test_package + PACKAGE_SEPARATOR + runner_class
    return runner_class


def resolve_manifest_fields(events: Iterable[ManifestEvent]) -> ManifestFields:
    """
    Scan manifest events and resolve the run identifiers.

    Every start tag is inspected until the stream ends or an END_DOCUMENT
    event is seen. When a tag or attribute appears more than once, the last
    value wins.

    Args:
        events: Manifest tag events

    Returns:
        ManifestFields with a fully-qualified runner class

    Raises:
        MissingManifestField: if any identifier is absent after the full scan
    """
    app_package: Optional[str] = None
    test_package: Optional[str] = None
    runner_class: Optional[str] = None

    for event in events:
        if event.kind is EventKind.END_DOCUMENT:
            break
        if event.kind is not EventKind.START_TAG:
            continue

        is_manifest = event.name == 'manifest'
        is_instrumentation = event.name == 'instrumentation'
        if not (is_manifest or is_instrumentation):
            continue

        for attr_name, attr_value in event.attributes:
            if is_manifest and attr_name == 'package':
                test_package = attr_value
            elif is_instrumentation and attr_name == 'targetPackage':
                app_package = attr_value
            elif is_instrumentation and attr_name == 'name':
                runner_class = attr_value

    if not test_package:
        raise MissingManifestField('test_package', "Could not find test application package.")
    if not app_package:
        raise MissingManifestField('application_package', "Could not find application package.")
    if not runner_class:
        raise MissingManifestField('runner_class', "Could not find test runner class.")

    return ManifestFields(
        application_package=app_package,
        test_package=test_package,
        runner_class=normalize_runner_class(runner_class, test_package),
    )
