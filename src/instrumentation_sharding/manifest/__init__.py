"""Manifest event sources and instrumentation field resolution."""

from .events import EventKind, ManifestEvent, load_manifest_events, parse_xml_manifest
from .resolver import ManifestFields, normalize_runner_class, resolve_manifest_fields

__all__ = [
    'EventKind',
    'ManifestEvent',
    'load_manifest_events',
    'parse_xml_manifest',
    'ManifestFields',
    'normalize_runner_class',
    'resolve_manifest_fields',
]
