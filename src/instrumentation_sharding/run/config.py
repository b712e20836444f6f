"""
Run parameters and their YAML form.

Example run config:

    sharding:
      total_nodes: 3
      node_index: 0
      filter: "LoginTest,com.example.*Smoke.*"
    execution:
      batch_size: 5

Every key is optional; missing keys take the defaults of RunParameters.
"""

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..selection.sharding import validate_node_index

DEFAULT_BATCH_SIZE = 5


@dataclass(frozen=True)
class RunParameters:
    """
    Sharding and execution parameters for one node.

    Example:
        params = RunParameters.from_yaml('config/shard.yaml')
        params = params.with_overrides(node_index=2)
    """
    total_nodes: int = 1
    node_index: int = 0
    batch_size: int = DEFAULT_BATCH_SIZE
    filter_patterns: Optional[str] = None

    def __post_init__(self):
        validate_node_index(self.total_nodes, self.node_index)
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")

    @property
    def sharded(self) -> bool:
        return self.total_nodes > 1

    def with_overrides(self, **overrides: Any) -> 'RunParameters':
        """Copy with the given fields replaced; None values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_mapping(cls, data: Optional[Dict[str, Any]]) -> 'RunParameters':
        """Build parameters from a parsed config document."""
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Run config must be a mapping, got {type(data).__name__}")

        sharding = data.get('sharding') or {}
        execution = data.get('execution') or {}
        for name, section in (('sharding', sharding), ('execution', execution)):
            if not isinstance(section, dict):
                raise ValueError(f"Config section '{name}' must be a mapping")

        return cls(
            total_nodes=int(sharding.get('total_nodes', 1)),
            node_index=int(sharding.get('node_index', 0)),
            batch_size=int(execution.get('batch_size', DEFAULT_BATCH_SIZE)),
            filter_patterns=sharding.get('filter') or None,
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'RunParameters':
        """Load run parameters from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Run config not found: {path}")

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        return cls.from_mapping(data)
