# -*- encoding: utf-8

from io import BytesIO

import mock
import pytest

from iiif_processor.exceptions import ConfigError, StreamResolutionError
from iiif_processor.streams import (
    ScopedStreamProvider,
    SimpleStreamProvider,
    StreamProvider,
    as_stream_provider,
)

BASE_URL = 'https://example.org/iiif/2/'


def read(stream):
    return stream.read()


class TestSimpleStreamProvider(object):

    def test_consumer_gets_the_stream(self):
        fn = mock.Mock(return_value=BytesIO(b'abc'))
        provider = SimpleStreamProvider(fn)
        assert provider.with_stream('id', BASE_URL, read) == b'abc'
        fn.assert_called_once_with('id', BASE_URL)

    def test_stream_is_closed_afterwards(self):
        stream = BytesIO(b'abc')
        SimpleStreamProvider(lambda ident, base_url: stream).with_stream('id', BASE_URL, read)
        assert stream.closed

    def test_stream_is_closed_when_the_consumer_fails(self):
        stream = BytesIO(b'abc')
        provider = SimpleStreamProvider(lambda ident, base_url: stream)

        def consumer(s):
            raise ValueError('bad image')

        with pytest.raises(ValueError):
            provider.with_stream('id', BASE_URL, consumer)
        assert stream.closed

    def test_no_stream_is_error(self):
        provider = SimpleStreamProvider(lambda ident, base_url: None)
        with pytest.raises(StreamResolutionError):
            provider.with_stream('id', BASE_URL, read)

    def test_os_error_is_stream_resolution_error(self):
        def fn(ident, base_url):
            raise FileNotFoundError(ident)

        with pytest.raises(StreamResolutionError) as err:
            SimpleStreamProvider(fn).with_stream('id', BASE_URL, read)
        assert isinstance(err.value.__cause__, FileNotFoundError)

    def test_must_wrap_a_callable(self):
        with pytest.raises(ConfigError):
            SimpleStreamProvider('not callable')


class TestScopedStreamProvider(object):

    def test_consumer_result_is_returned(self):
        def fn(ident, base_url, consumer):
            with BytesIO(ident.encode('ascii')) as stream:
                return consumer(stream)

        assert ScopedStreamProvider(fn).with_stream('xyz', BASE_URL, read) == b'xyz'

    def test_provider_that_never_calls_the_consumer_is_error(self):
        provider = ScopedStreamProvider(lambda ident, base_url, consumer: None)
        with pytest.raises(StreamResolutionError):
            provider.with_stream('id', BASE_URL, read)

    def test_os_error_before_consuming_is_stream_resolution_error(self):
        def fn(ident, base_url, consumer):
            raise ConnectionError('unreachable')

        with pytest.raises(StreamResolutionError):
            ScopedStreamProvider(fn).with_stream('id', BASE_URL, read)

    def test_consumer_errors_are_not_reported_as_missing_source(self):
        def fn(ident, base_url, consumer):
            return consumer(BytesIO(b''))

        def consumer(stream):
            raise OSError('cannot identify image file')

        with pytest.raises(OSError) as err:
            ScopedStreamProvider(fn).with_stream('id', BASE_URL, consumer)
        assert not isinstance(err.value, StreamResolutionError)

    def test_stream_resolution_errors_pass_through(self):
        def fn(ident, base_url, consumer):
            raise StreamResolutionError('gone')

        with pytest.raises(StreamResolutionError, match='gone'):
            ScopedStreamProvider(fn).with_stream('id', BASE_URL, read)


class TestAsStreamProvider(object):

    def test_providers_are_kept(self):
        provider = ScopedStreamProvider(lambda ident, base_url, consumer: None)
        assert as_stream_provider(provider) is provider

    def test_callables_are_simple(self):
        provider = as_stream_provider(lambda ident, base_url: BytesIO(b'abc'))
        assert isinstance(provider, SimpleStreamProvider)
        assert provider.with_stream('id', BASE_URL, read) == b'abc'

    @pytest.mark.parametrize('value', [None, 'file.jpg', 42])
    def test_other_values_are_rejected(self, value):
        with pytest.raises(ConfigError, match='stream_provider must be specified'):
            as_stream_provider(value)

    def test_base_class_is_abstract(self):
        with pytest.raises(NotImplementedError):
            StreamProvider().with_stream('id', BASE_URL, read)
