"""
Manifest event sources.

The resolver consumes a manifest as a stream of tag events. This module
produces that stream from a loose text manifest or from the
AndroidManifest.xml entry of a packaged test application.

Packaged applications normally carry a compiled (binary) manifest. Decoding
that format is left to a caller-supplied decoder: any callable taking the raw
entry bytes and returning an iterable of ManifestEvent.
"""

import zipfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, Union
from xml.etree import ElementTree

from ..errors import ManifestUnreadable

MANIFEST_ENTRY = 'AndroidManifest.xml'


class EventKind(Enum):
    START_TAG = 'start_tag'
    END_TAG = 'end_tag'
    END_DOCUMENT = 'end_document'


@dataclass(frozen=True)
class ManifestEvent:
    """A single tag event. Attributes are (name, string value) pairs in document order."""
    kind: EventKind
    name: Optional[str] = None
    attributes: Tuple[Tuple[str, str], ...] = ()

    def attribute_value(self, name: str) -> Optional[str]:
        """Value of the last attribute called name, or None."""
        value = None
        for attr_name, attr_value in self.attributes:
            if attr_name == name:
                value = attr_value
        return value


ManifestDecoder = Callable[[bytes], Iterable[ManifestEvent]]


def _local_name(name: str) -> str:
    # '{http://schemas.android.com/apk/res/android}name' -> 'name'
    return name.rsplit('}', 1)[-1]


def parse_xml_manifest(data: Union[str, bytes]) -> List[ManifestEvent]:
    """
    Decode a text XML manifest into tag events.

    Namespace URIs are dropped from tag and attribute names, so android:name
    is reported as 'name'. The list always ends with an END_DOCUMENT event.

    Args:
        data: Manifest document

    Returns:
        List of events in document order

    Raises:
        ManifestUnreadable: if the document is not well-formed XML
    """
    if isinstance(data, str):
        data = data.encode('utf-8')

    parser = ElementTree.XMLPullParser(events=('start', 'end'))
    events = []
    try:
        parser.feed(data)
        parser.close()
        for action, element in parser.read_events():
            if action == 'start':
                attributes = tuple(
                    (_local_name(name), value) for name, value in element.attrib.items()
                )
                events.append(ManifestEvent(EventKind.START_TAG, _local_name(element.tag), attributes))
            else:
                events.append(ManifestEvent(EventKind.END_TAG, _local_name(element.tag)))
    except ElementTree.ParseError as e:
        raise ManifestUnreadable(f"Unable to parse manifest XML: {e}") from e

    events.append(ManifestEvent(EventKind.END_DOCUMENT))
    return events


def _is_text_manifest(data: bytes) -> bool:
    return data.lstrip(b'\xef\xbb\xbf \t\r\n').startswith(b'<')


def read_manifest_bytes(path: Union[str, Path]) -> bytes:
    """
    Read the raw manifest from an APK/zip or from a loose .xml file.

    Raises:
        ManifestUnreadable: if the file or the manifest entry cannot be read
    """
    path = Path(path)
    try:
        if zipfile.is_zipfile(path):
            with zipfile.ZipFile(path) as zf:
                return zf.read(MANIFEST_ENTRY)
        return path.read_bytes()
    except KeyError as e:
        raise ManifestUnreadable(f"No {MANIFEST_ENTRY} entry in {path}") from e
    except (OSError, zipfile.BadZipFile) as e:
        raise ManifestUnreadable(f"Unable to read manifest from {path}: {e}") from e


def load_manifest_events(
    path: Union[str, Path],
    decoder: Optional[ManifestDecoder] = None,
) -> List[ManifestEvent]:
    """
    Load the manifest of a test application as tag events.

    Args:
        path: Test APK (zip) or a loose AndroidManifest.xml
        decoder: Decoder for binary manifests (required for compiled APKs)

    Returns:
        List of manifest events

    Raises:
        ManifestUnreadable: if the manifest cannot be located or decoded
    """
    data = read_manifest_bytes(path)

    if _is_text_manifest(data):
        return parse_xml_manifest(data)

    if decoder is None:
        raise ManifestUnreadable(
            f"Manifest in {path} is binary; a manifest decoder is required to read it"
        )

    try:
        return list(decoder(data))
    except Exception as e:
        raise ManifestUnreadable(f"Unable to decode manifest from {path}: {e}") from e
