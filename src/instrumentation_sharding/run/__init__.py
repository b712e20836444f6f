"""Run parameters, descriptor assembly, and work distribution."""

from .config import RunParameters
from .descriptor import RunDescriptor, build_run_descriptor, plan_run
from .dispatcher import dispatch_batches
from .work_queue import TestClassQueue

__all__ = [
    'RunParameters',
    'RunDescriptor',
    'build_run_descriptor',
    'plan_run',
    'dispatch_batches',
    'TestClassQueue',
]
