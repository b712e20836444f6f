"""
Run descriptor assembly.

Combines the identifiers resolved from the test manifest with this node's
share of the test classes into one immutable RunDescriptor:

    manifest events  -> resolve_manifest_fields ----------------------+
                                                                      |
    discovered classes -> dedupe -> filter -> sort -> shard ----------+--> RunDescriptor

The manifest is resolved first, so a bad manifest aborts the run before any
discovery or sharding happens.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, Union

from ..manifest.events import ManifestDecoder, ManifestEvent, load_manifest_events
from ..manifest.resolver import resolve_manifest_fields
from ..models import TestClass, unique_test_classes
from ..selection.class_filter import filter_test_classes
from ..selection.sharding import shard_test_classes, validate_node_index
from .config import DEFAULT_BATCH_SIZE, RunParameters
from .work_queue import TestClassQueue, class_names

logger = logging.getLogger(__name__)

ClassSource = Union[Iterable[TestClass], Callable[[], Iterable[TestClass]]]


@dataclass(frozen=True)
class RunDescriptor:
    """
    Resolved configuration for one node's test run.

    owned_classes is None when the run is not sharded, meaning every test in
    the test package runs on this node.
    """
    application_package: str
    test_package: str
    runner_class: str
    owned_classes: Optional[Tuple[TestClass, ...]] = None
    total_nodes: int = 1
    node_index: int = 0
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self):
        for name in ('application_package', 'test_package', 'runner_class'):
            if not getattr(self, name):
                raise ValueError(f"RunDescriptor requires a non-empty {name}")
        validate_node_index(self.total_nodes, self.node_index)
        if self.total_nodes == 1 and self.owned_classes is not None:
            raise ValueError("A single node run owns every class; owned_classes must be None")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")

    @property
    def sharded(self) -> bool:
        return self.owned_classes is not None

    def class_names(self) -> Optional[List[str]]:
        """Names of the owned classes, or None when there is no explicit class list."""
        return class_names(self.owned_classes)

    def create_queue(self, all_classes: Optional[Iterable[TestClass]] = None) -> TestClassQueue:
        """
        Build the work queue for this node.

        Args:
            all_classes: Full class set, used only when the run is not sharded

        Returns:
            Queue over the owned classes (or over all_classes)
        """
        if self.owned_classes is not None:
            return TestClassQueue(self.owned_classes)
        if all_classes is None:
            raise ValueError("Run is not sharded; pass the full class set to create a queue")
        return TestClassQueue(unique_test_classes(all_classes))

    def describe(self) -> str:
        """Field-by-field description for logs and CLI output."""
        if self.owned_classes is None:
            owned = 'all'
        else:
            owned = f"{len(self.owned_classes)} classes"
        return (
            f"RunDescriptor("
            f"application_package={self.application_package}, "
            f"test_package={self.test_package}, "
            f"runner_class={self.runner_class}, "
            f"owned_classes={owned}, "
            f"total_nodes={self.total_nodes}, "
            f"node_index={self.node_index}, "
            f"batch_size={self.batch_size})"
        )

    def __str__(self) -> str:
        return self.describe()


def select_node_classes(
    discovered: Iterable[TestClass],
    parameters: RunParameters,
) -> List[TestClass]:
    """Dedupe, filter, sort and shard discovered classes for one node."""
    test_classes = unique_test_classes(discovered)
    test_classes = filter_test_classes(test_classes, parameters.filter_patterns)
    logger.info("loaded %d classes", len(test_classes))
    owned = list(shard_test_classes(test_classes, parameters.total_nodes, parameters.node_index))
    logger.info("Filtered down to %d classes", len(owned))
    return owned


def build_run_descriptor(
    manifest_events: Iterable[ManifestEvent],
    discovered: ClassSource,
    parameters: Optional[RunParameters] = None,
) -> RunDescriptor:
    """
    Assemble the descriptor for one node.

    Args:
        manifest_events: Tag events of the test manifest
        discovered: Discovered test classes, or a callable producing them.
            A callable is only invoked when the run is sharded.
        parameters: Sharding and execution parameters (defaults: one node)

    Returns:
        Immutable RunDescriptor

    Raises:
        MissingManifestField: if the manifest lacks a required identifier
    """
    parameters = parameters or RunParameters()
    fields = resolve_manifest_fields(manifest_events)

    owned: Optional[Tuple[TestClass, ...]] = None
    if parameters.sharded:
        logger.info("loading test classes")
        classes = discovered() if callable(discovered) else discovered
        owned = tuple(select_node_classes(classes, parameters))
    else:
        if parameters.filter_patterns:
            logger.warning("Single node run; ignoring filter %r", parameters.filter_patterns)
        logger.info("Not filtering test classes")

    return RunDescriptor(
        application_package=fields.application_package,
        test_package=fields.test_package,
        runner_class=fields.runner_class,
        owned_classes=owned,
        total_nodes=parameters.total_nodes,
        node_index=parameters.node_index,
        batch_size=parameters.batch_size,
    )


def plan_run(
    manifest_path: Union[str, Path],
    discovered: ClassSource,
    parameters: Optional[RunParameters] = None,
    decoder: Optional[ManifestDecoder] = None,
) -> RunDescriptor:
    """
    Load a test APK's manifest and assemble this node's run descriptor.

    Raises:
        ManifestUnreadable: if the manifest cannot be located or decoded
        MissingManifestField: if the manifest lacks a required identifier
    """
    events = load_manifest_events(manifest_path, decoder=decoder)
    return build_run_descriptor(events, discovered, parameters)
