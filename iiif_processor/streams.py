# -*- encoding: utf-8 -*-
"""
`streams` -- Get at the bytes of a source image
===============================================

A stream provider turns an identifier into a readable binary stream. There
are two kinds, and the caller picks one explicitly:

* :class:`SimpleStreamProvider` wraps ``fn(id, base_url) -> stream``; the
  stream is closed once the consumer is done with it.
* :class:`ScopedStreamProvider` wraps ``fn(id, base_url, consumer)``, which
  opens the stream itself, calls ``consumer(stream)``, cleans up and returns
  whatever the consumer returned.

Either way the rest of the package only calls :meth:`with_stream`.
"""
from contextlib import closing
from logging import getLogger

from iiif_processor.exceptions import ConfigError, StreamResolutionError

logger = getLogger(__name__)


class StreamProvider(object):

    def with_stream(self, ident, base_url, consumer):
        """
        Args:
            ident (str): the image identifier.
            base_url (str): the base URL of the request.
            consumer (callable): called with the open stream.
        Returns:
            whatever ``consumer`` returns.
        Raises:
            StreamResolutionError if no stream could be supplied.
        """
        cn = self.__class__.__name__
        raise NotImplementedError('with_stream() not implemented for %s' % (cn,))


class SimpleStreamProvider(StreamProvider):

    def __init__(self, fn):
        if not callable(fn):
            raise ConfigError('stream provider function must be callable, not %r' % (fn,))
        self.fn = fn

    def open_stream(self, ident, base_url):
        return self.fn(ident, base_url)

    def with_stream(self, ident, base_url, consumer):
        logger.debug('Requesting stream for %s', ident)
        try:
            stream = self.open_stream(ident, base_url)
        except OSError as err:
            raise StreamResolutionError(
                'Could not open source image for identifier: %s (%s)' % (ident, err)
            ) from err
        if stream is None:
            raise StreamResolutionError('No source image for identifier: %s' % (ident,))

        with closing(stream):
            return consumer(stream)


class ScopedStreamProvider(StreamProvider):

    def __init__(self, fn):
        if not callable(fn):
            raise ConfigError('stream provider function must be callable, not %r' % (fn,))
        self.fn = fn

    def stream_into(self, ident, base_url, consumer):
        return self.fn(ident, base_url, consumer)

    def with_stream(self, ident, base_url, consumer):
        logger.debug('Requesting scoped stream for %s', ident)
        consumed = []

        def _consumer(stream):
            consumed.append(True)
            return consumer(stream)

        try:
            result = self.stream_into(ident, base_url, _consumer)
        except OSError as err:
            # errors from the consumer are not the provider's to report
            if consumed:
                raise
            raise StreamResolutionError(
                'Could not open source image for identifier: %s (%s)' % (ident, err)
            ) from err

        if not consumed:
            raise StreamResolutionError('No source image for identifier: %s' % (ident,))
        return result


def as_stream_provider(provider):
    """A StreamProvider as is; a plain callable as a SimpleStreamProvider."""
    if isinstance(provider, StreamProvider):
        return provider
    if callable(provider):
        return SimpleStreamProvider(provider)
    raise ConfigError('stream_provider must be specified')
