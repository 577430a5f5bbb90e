# -*- encoding: utf-8 -*-

from os import path

import pytest

from iiif_processor.config import (
    import_class, load_stream_provider, processor_options, read_config,
)
from iiif_processor.exceptions import ConfigError
from iiif_processor.parameters import MaxConstraint
from iiif_processor.resolver import FilesystemStreamProvider, HTTPStreamProvider

CONFIG_FILE = path.join(path.dirname(path.dirname(path.abspath(__file__))), 'etc', 'iiif_processor.conf')


class TestReadConfig(object):

    def test_shipped_config(self):
        config = read_config(CONFIG_FILE)
        assert config['logging']['log_to'] == 'console'
        assert config['processor']['max_width'] == 10000
        assert config['processor']['raster_options'] == {}
        assert config['resolver']['impl'] == 'iiif_processor.resolver.FilesystemStreamProvider'

    def test_environment_is_interpolated(self, tmp_path, monkeypatch):
        monkeypatch.setenv('IIIF_IMAGES', str(tmp_path))
        config_file = tmp_path / 'test.conf'
        config_file.write_text(
            "[resolver]\n"
            "impl = 'iiif_processor.resolver.FilesystemStreamProvider'\n"
            "src_img_root = '$IIIF_IMAGES/src'\n"
        )
        config = read_config(str(config_file))
        assert config['resolver']['src_img_root'] == '%s/src' % (tmp_path,)


class TestImportClass(object):

    def test_imports_the_class(self):
        assert import_class('iiif_processor.resolver.HTTPStreamProvider') is HTTPStreamProvider

    @pytest.mark.parametrize('qname', [
        'HTTPStreamProvider',
        'iiif_processor.resolver.NoSuchProvider',
        'no_such_module.NoSuchProvider',
    ])
    def test_bad_names_are_config_errors(self, qname):
        with pytest.raises(ConfigError):
            import_class(qname)


class TestLoadStreamProvider(object):

    def test_shipped_config(self):
        provider = load_stream_provider(read_config(CONFIG_FILE))
        assert isinstance(provider, FilesystemStreamProvider)
        assert provider.source_roots == ['/usr/local/share/images']

    def test_section_is_passed_to_the_provider(self):
        provider = load_stream_provider({'resolver': {
            'impl': 'iiif_processor.resolver.HTTPStreamProvider',
            'source_prefix': 'http://sample.sample/',
            'timeout': 5,
        }})
        assert provider.source_prefix == 'http://sample.sample/'
        assert provider.timeout == 5

    @pytest.mark.parametrize('config', [{}, {'resolver': {'src_img_root': '/tmp'}}])
    def test_impl_is_required(self, config):
        with pytest.raises(ConfigError, match='resolver.impl must be set'):
            load_stream_provider(config)


class TestProcessorOptions(object):

    def test_shipped_config(self):
        options = processor_options(read_config(CONFIG_FILE))
        assert options == {
            'iiif_version': None,
            'path_prefix': None,
            'include_metadata': False,
            'density': None,
            'raster_options': {},
            'max_size': MaxConstraint(width=10000),
        }

    def test_empty_section(self):
        options = processor_options({})
        assert 'max_size' not in options
        assert options['include_metadata'] is False

    def test_all_options(self):
        options = processor_options({'processor': {
            'iiif_version': '3',
            'path_prefix': 'images/',
            'max_width': 2000,
            'max_height': 1000,
            'include_metadata': True,
            'density': 300,
            'raster_options': {'quality': 75},
        }})
        assert options['max_size'] == MaxConstraint(2000, 1000)
        assert options['iiif_version'] == '3'
        assert options['path_prefix'] == 'images/'
        assert options['density'] == 300
        assert options['raster_options'] == {'quality': 75}

    def test_max_height_alone_is_config_error(self):
        with pytest.raises(ConfigError):
            processor_options({'processor': {'max_height': 1000}})
