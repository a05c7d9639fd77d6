"""Tests for composer manifest loading and vendor-app resolution."""

import json

import pytest

from scaffold_installer.errors import (
    ConfigurationError,
    CorruptError,
    NotConfiguredError,
    NotFoundError,
)
from scaffold_installer.manifest import VendorManifest, load_manifest, resolve


def write_json(path, data):
    path.write_text(json.dumps(data))
    return str(path)


class TestLoadManifest:
    """Test reading the autoload psr-4 map."""

    def test_json_manifest(self, tmp_path):
        path = write_json(tmp_path / 'composer.json', {
            'autoload': {'psr-4': {'Vendor\\App\\': 'src/', 'Vendor\\Other\\': 'other/'}},
        })
        manifest = load_manifest(path)
        assert manifest.path == path
        assert dict(manifest.psr4) == {'Vendor\\App\\': 'src/', 'Vendor\\Other\\': 'other/'}

    def test_yaml_manifest(self, tmp_path):
        path = tmp_path / 'composer.yaml'
        path.write_text(
            "autoload:\n"
            "  psr-4:\n"
            "    'Vendor\\App\\': src/\n"
        )
        assert dict(load_manifest(str(path)).psr4) == {'Vendor\\App\\': 'src/'}

    def test_list_of_roots_uses_first(self, tmp_path):
        path = write_json(tmp_path / 'composer.json', {
            'autoload': {'psr-4': {'Vendor\\App\\': ['src/', 'lib/']}},
        })
        assert load_manifest(path).get('Vendor\\App\\') == 'src/'

    def test_manifest_without_autoload(self, tmp_path):
        path = write_json(tmp_path / 'composer.json', {'name': 'vendor/app'})
        assert dict(load_manifest(path).psr4) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError, match='composer file not found or uri leads not to a file'):
            load_manifest(str(tmp_path / 'composer.json'))

    def test_directory_is_not_a_manifest(self, tmp_path):
        with pytest.raises(NotFoundError):
            load_manifest(str(tmp_path))

    @pytest.mark.parametrize('content', [
        '<?php echo 1;',
        '',
        '{}',
        '[1, 2]',
        '{"autoload": "src/"}',
        '{"autoload": {"psr-4": ["src/"]}}',
        '{"autoload": {"psr-4": {"Vendor\\\\App\\\\": 5}}}',
    ])
    def test_corrupted(self, tmp_path, content):
        path = tmp_path / 'composer.json'
        path.write_text(content)
        with pytest.raises(CorruptError, match='file corrupted'):
            load_manifest(str(path))

    def test_corrupted_yaml(self, tmp_path):
        path = tmp_path / 'composer.yml'
        path.write_text('autoload: [unclosed\n')
        with pytest.raises(CorruptError):
            load_manifest(str(path))


class TestResolve:
    """Test vendor-app key lookup."""

    @pytest.fixture
    def manifest(self):
        return VendorManifest(path='composer.json', psr4={'Vendor\\App\\': 'src/', 'Vendor\\Empty\\': ''})

    @pytest.mark.parametrize('key', ['Vendor\\App', 'Vendor\\App\\', 'Vendor\\App\\\\'])
    def test_key_is_separator_terminated(self, manifest, key):
        assert resolve(manifest, key) == 'src/'

    def test_unknown_app(self, manifest):
        with pytest.raises(NotFoundError, match='app not found in composer'):
            resolve(manifest, 'Vendor\\Nope')

    def test_empty_root_counts_as_missing(self, manifest):
        with pytest.raises(NotFoundError):
            resolve(manifest, 'Vendor\\Empty')

    def test_not_loaded(self):
        with pytest.raises(NotConfiguredError, match='composer not defined') as exc:
            resolve(None, 'Vendor\\App')
        assert isinstance(exc.value, ConfigurationError)
