import os

import pytest
import requests
import responses

from iiif_processor.exceptions import ConfigError, StreamResolutionError
from iiif_processor.resolver import FilesystemStreamProvider, HTTPStreamProvider
from tests.image_helpers import image_bytes, open_image

BASE_URL = 'https://example.org/iiif/2/'


check_options_test_cases = [
    ({'source_prefix': 'http://sample.sample/'}, {'verify': True, 'timeout': 30}),
    ({'source_prefix': 'http://sample.sample/', 'user': 'iiif'}, {'verify': True, 'timeout': 30}),
    ({'source_prefix': 'http://sample.sample/', 'user': 'iiif', 'pw': 's3cr3t'},
     {'auth': ('iiif', 's3cr3t'), 'verify': True, 'timeout': 30}),
    ({'source_prefix': 'http://sample.sample/', 'ssl_check': False, 'timeout': 5},
     {'verify': False, 'timeout': 5}),
]


def read(stream):
    return stream.read()


@pytest.fixture
def img_roots(tmp_path):
    first = tmp_path / 'img'
    second = tmp_path / 'img2'
    (first / '01').mkdir(parents=True)
    second.mkdir()
    (first / '01' / '0001.jpg').write_bytes(b'first')
    (first / 'both.jpg').write_bytes(b'first')
    (second / 'both.jpg').write_bytes(b'second')
    return str(first), str(second)


class TestFilesystemStreamProvider(object):

    def test_needs_a_root(self):
        with pytest.raises(ConfigError):
            FilesystemStreamProvider({})

    def test_source_file_path(self, img_roots):
        provider = FilesystemStreamProvider({'src_img_root': img_roots[0]})
        assert provider.source_file_path('01/0001.jpg') == os.path.join(img_roots[0], '01/0001.jpg')
        assert provider.source_file_path('DOES_NOT_EXIST.jpg') is None

    def test_reads_the_file(self, img_roots):
        provider = FilesystemStreamProvider({'src_img_root': img_roots[0]})
        assert provider.with_stream('01/0001.jpg', BASE_URL, read) == b'first'

    def test_first_root_wins(self, img_roots):
        provider = FilesystemStreamProvider({'src_img_roots': list(reversed(img_roots))})
        assert provider.with_stream('both.jpg', BASE_URL, read) == b'second'

    def test_later_roots_are_searched(self, img_roots):
        provider = FilesystemStreamProvider({'src_img_roots': list(reversed(img_roots))})
        assert provider.with_stream('01/0001.jpg', BASE_URL, read) == b'first'

    def test_missing_file(self, img_roots):
        provider = FilesystemStreamProvider({'src_img_root': img_roots[0]})
        with pytest.raises(StreamResolutionError):
            provider.with_stream('DOES_NOT_EXIST.jpg', BASE_URL, read)


@pytest.fixture
def mock_responses():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(
            responses.GET, 'http://sample.sample/0001/accessMaster',
            body=image_bytes(40, 30),
            status=200,
            content_type='image/jpeg',
        )
        rsps.add(
            responses.GET, 'http://other.sample/0002.jpg',
            body=b'direct',
            status=200,
        )
        rsps.add(
            responses.GET, 'http://sample.sample/DOESNOTEXIST/accessMaster',
            body='Does Not Exist',
            status=404,
            content_type='application/html',
        )
        rsps.add(
            responses.GET, 'http://sample.sample/TIMEOUT/accessMaster',
            body=requests.exceptions.ConnectTimeout('too slow'),
        )
        yield rsps


class TestHTTPStreamProvider(object):

    config = {
        'source_prefix': 'http://sample.sample/',
        'source_suffix': '/accessMaster',
        'uri_resolvable': True,
    }

    def test_needs_a_prefix_or_uri_resolvable(self):
        with pytest.raises(ConfigError):
            HTTPStreamProvider({})
        HTTPStreamProvider({'uri_resolvable': True})

    @pytest.mark.parametrize('config, expected', check_options_test_cases)
    def test_request_options(self, config, expected):
        assert HTTPStreamProvider(config).request_options() == expected

    def test_web_request_url(self):
        provider = HTTPStreamProvider(self.config)
        assert provider.web_request_url('0001') == 'http://sample.sample/0001/accessMaster'
        assert provider.web_request_url('https://other.sample/x.jpg') == 'https://other.sample/x.jpg'

    def test_full_uris_need_uri_resolvable(self):
        provider = HTTPStreamProvider({'source_prefix': 'http://sample.sample/'})
        assert provider.web_request_url('http://a/b') == 'http://sample.sample/http://a/b'

    def test_bad_url(self):
        provider = HTTPStreamProvider({'source_prefix': 'ftp://sample.sample/'})
        with pytest.raises(StreamResolutionError):
            provider.web_request_url('0001')

    def test_consumer_gets_the_body(self, mock_responses):
        provider = HTTPStreamProvider(self.config)
        im = provider.with_stream('0001', BASE_URL, lambda stream: open_image(stream.read()))
        assert im.size == (40, 30)

    def test_uri_resolvable(self, mock_responses):
        provider = HTTPStreamProvider(self.config)
        assert provider.with_stream('http://other.sample/0002.jpg', BASE_URL, read) == b'direct'

    def test_not_found(self, mock_responses):
        provider = HTTPStreamProvider(self.config)
        with pytest.raises(StreamResolutionError) as err:
            provider.with_stream('DOESNOTEXIST', BASE_URL, read)
        assert '404' in str(err.value)

    def test_connection_errors(self, mock_responses):
        provider = HTTPStreamProvider(self.config)
        with pytest.raises(StreamResolutionError):
            provider.with_stream('TIMEOUT', BASE_URL, read)

    def test_credentials_are_sent(self, mock_responses):
        config = dict(self.config, user='iiif', pw='s3cr3t')
        HTTPStreamProvider(config).with_stream('0001', BASE_URL, read)
        assert mock_responses.calls[0].request.headers['Authorization'].startswith('Basic ')
