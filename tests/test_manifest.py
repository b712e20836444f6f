"""Tests for manifest event sources and field resolution."""

import zipfile

import pytest

from instrumentation_sharding.errors import ManifestUnreadable, MissingManifestField
from instrumentation_sharding.manifest.events import (
    EventKind, ManifestEvent, load_manifest_events, parse_xml_manifest
)
from instrumentation_sharding.manifest.resolver import (
    normalize_runner_class, resolve_manifest_fields
)

TEST_MANIFEST = """<?xml version="1.0" encoding="utf-8"?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android"
    package="com.example.test">
    <application />
    <instrumentation
        android:name=".MyRunner"
        android:targetPackage="com.example" />
</manifest>
"""


def _start(tag, **attributes):
    return ManifestEvent(EventKind.START_TAG, tag, tuple(attributes.items()))


def _events(*events):
    return list(events) + [ManifestEvent(EventKind.END_DOCUMENT)]


class TestNormalizeRunnerClass:
    """Tests for runner class qualification."""

    def test_leading_separator(self):
        assert normalize_runner_class('.MyRunner', 'com.example.test') == 'com.example.test.MyRunner'

    def test_bare_name(self):
        assert normalize_runner_class('MyRunner', 'com.example.test') == 'com.example.test.MyRunner'

    def test_fully_qualified_unchanged(self):
        assert normalize_runner_class('com.other.MyRunner', 'com.example.test') == 'com.other.MyRunner'


class TestResolveManifestFields:
    """Tests for resolve_manifest_fields."""

    def test_resolves_all_fields(self):
        """Identifiers are taken from manifest and instrumentation tags."""
        events = _events(
            _start('manifest', package='com.example.test'),
            _start('instrumentation', name='.MyRunner', targetPackage='com.example'),
        )

        fields = resolve_manifest_fields(events)

        assert fields.test_package == 'com.example.test'
        assert fields.application_package == 'com.example'
        assert fields.runner_class == 'com.example.test.MyRunner'

    def test_last_value_wins(self):
        """Repeated instrumentation tags override earlier ones."""
        events = _events(
            _start('manifest', package='com.example.test'),
            _start('instrumentation', name='FirstRunner', targetPackage='com.first'),
            _start('instrumentation', name='com.other.SecondRunner', targetPackage='com.second'),
        )

        fields = resolve_manifest_fields(events)

        assert fields.application_package == 'com.second'
        assert fields.runner_class == 'com.other.SecondRunner'

    def test_attributes_on_other_tags_ignored(self):
        """A 'name' attribute outside instrumentation is not the runner."""
        events = _events(
            _start('manifest', package='com.example.test'),
            _start('activity', name='com.example.Main', targetPackage='com.wrong'),
            _start('instrumentation', name='Runner', targetPackage='com.example'),
        )

        fields = resolve_manifest_fields(events)

        assert fields.application_package == 'com.example'
        assert fields.runner_class == 'com.example.test.Runner'

    def test_stops_at_end_document(self):
        """Events after END_DOCUMENT are not scanned."""
        events = [
            _start('manifest', package='com.example.test'),
            ManifestEvent(EventKind.END_DOCUMENT),
            _start('instrumentation', name='Runner', targetPackage='com.example'),
        ]

        with pytest.raises(MissingManifestField) as excinfo:
            resolve_manifest_fields(events)

        assert excinfo.value.field == 'application_package'

    @pytest.mark.parametrize('events, missing', [
        ([_start('instrumentation', name='R', targetPackage='com.example')], 'test_package'),
        ([_start('manifest', package='com.t'), _start('instrumentation', name='R')], 'application_package'),
        ([_start('manifest', package='com.t'), _start('instrumentation', targetPackage='com.a')], 'runner_class'),
    ])
    def test_missing_field_named(self, events, missing):
        """The error names the first missing identifier."""
        with pytest.raises(MissingManifestField) as excinfo:
            resolve_manifest_fields(_events(*events))

        assert excinfo.value.field == missing


class TestParseXmlManifest:
    """Tests for text manifest decoding."""

    def test_namespaces_stripped(self):
        """android:name is reported as 'name'."""
        events = parse_xml_manifest(TEST_MANIFEST)

        instrumentation = [e for e in events if e.kind is EventKind.START_TAG and e.name == 'instrumentation']
        assert instrumentation[0].attribute_value('name') == '.MyRunner'
        assert instrumentation[0].attribute_value('targetPackage') == 'com.example'
        assert events[-1].kind is EventKind.END_DOCUMENT

    def test_end_tags_reported(self):
        events = parse_xml_manifest(TEST_MANIFEST)

        assert ManifestEvent(EventKind.END_TAG, 'manifest') in events

    def test_malformed_xml(self):
        with pytest.raises(ManifestUnreadable):
            parse_xml_manifest('<manifest package="x"><instrumentation></manifest>')


class TestLoadManifestEvents:
    """Tests for locating the manifest in files and APKs."""

    def test_loose_xml_file(self, tmp_path):
        path = tmp_path / 'AndroidManifest.xml'
        path.write_text(TEST_MANIFEST)

        fields = resolve_manifest_fields(load_manifest_events(path))

        assert fields.runner_class == 'com.example.test.MyRunner'

    def test_apk_with_text_manifest(self, tmp_path):
        apk = tmp_path / 'app-test.apk'
        with zipfile.ZipFile(apk, 'w') as zf:
            zf.writestr('AndroidManifest.xml', TEST_MANIFEST)
            zf.writestr('classes.dex', b'dex\n035\x00')

        fields = resolve_manifest_fields(load_manifest_events(apk))

        assert fields.application_package == 'com.example'

    def test_apk_without_manifest(self, tmp_path):
        apk = tmp_path / 'app-test.apk'
        with zipfile.ZipFile(apk, 'w') as zf:
            zf.writestr('classes.dex', b'dex\n035\x00')

        with pytest.raises(ManifestUnreadable) as excinfo:
            load_manifest_events(apk)

        assert isinstance(excinfo.value.__cause__, KeyError)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ManifestUnreadable):
            load_manifest_events(tmp_path / 'missing.apk')

    def test_binary_manifest_uses_decoder(self, tmp_path):
        """Compiled manifests are handed to the supplied decoder."""
        apk = tmp_path / 'app-test.apk'
        with zipfile.ZipFile(apk, 'w') as zf:
            zf.writestr('AndroidManifest.xml', b'\x03\x00\x08\x00binary')

        def decoder(data):
            assert data.startswith(b'\x03\x00')
            return _events(
                _start('manifest', package='com.example.test'),
                _start('instrumentation', name='Runner', targetPackage='com.example'),
            )

        fields = resolve_manifest_fields(load_manifest_events(apk, decoder=decoder))

        assert fields.runner_class == 'com.example.test.Runner'

    def test_binary_manifest_without_decoder(self, tmp_path):
        apk = tmp_path / 'app-test.apk'
        with zipfile.ZipFile(apk, 'w') as zf:
            zf.writestr('AndroidManifest.xml', b'\x03\x00\x08\x00binary')

        with pytest.raises(ManifestUnreadable):
            load_manifest_events(apk)

    def test_decoder_failure_wrapped(self, tmp_path):
        apk = tmp_path / 'app-test.apk'
        with zipfile.ZipFile(apk, 'w') as zf:
            zf.writestr('AndroidManifest.xml', b'\x03\x00\x08\x00binary')

        def decoder(data):
            raise EOFError("truncated chunk")

        with pytest.raises(ManifestUnreadable) as excinfo:
            load_manifest_events(apk, decoder=decoder)

        assert isinstance(excinfo.value.__cause__, EOFError)
