# -*- encoding: utf-8 -*-
"""
Native and pyramid level sizes of the image behind a request.
"""
from collections.abc import Mapping
from logging import getLogger

import attr

from iiif_processor.exceptions import DimensionResolutionError

logger = getLogger(__name__)


@attr.s(slots=True, frozen=True)
class Dimensions(object):
    width = attr.ib(converter=int)
    height = attr.ib(converter=int)

    def scaled(self, level):
        """The size at pyramid level ``level``: each level halves the previous one."""
        return Dimensions(self.width // 2 ** level, self.height // 2 ** level)


def pyramid(width, height, pages=1):
    '''
    Args:
        width (int), height (int): native size.
        pages (int): number of resolution levels the source exposes.
    Returns:
        tuple(Dimensions): native size first, then each level at half the
        linear scale of the one before.
    '''
    native = Dimensions(width, height)
    return tuple(native.scaled(level) for level in range(max(1, pages)))


def _normalize(dims):
    if isinstance(dims, (Dimensions, Mapping)):
        dims = [dims]
    try:
        levels = tuple(
            d if isinstance(d, Dimensions) else Dimensions(d['width'], d['height'])
            for d in dims
        )
    except (KeyError, TypeError, ValueError) as err:
        raise DimensionResolutionError('Malformed dimensions %r: %s' % (dims, err)) from err

    if any(d.width < 1 or d.height < 1 for d in levels):
        raise DimensionResolutionError('Dimensions must be positive: %r' % (levels,))
    # native first; no level may be larger than the one before it
    for larger, smaller in zip(levels, levels[1:]):
        if smaller.width > larger.width or smaller.height > larger.height:
            raise DimensionResolutionError('Pyramid levels must not increase: %r' % (levels,))
    return levels


class DimensionResolver(object):
    '''Resolves, at most once, the DimensionSet of the image in a request.

    Slots:
        context (RequestContext)
        stream_provider (StreamProvider)
        engine: raster engine exposing ``probe(stream)``.
        dimension_function (callable): optional custom strategy,
            ``dimension_function(id, base_url)``; returning None falls back
            to probing the source.
    '''
    __slots__ = (
        'context', 'stream_provider', 'engine', 'dimension_function', '_dimensions', '_error',
    )

    def __init__(self, context, stream_provider, engine, dimension_function=None):
        self.context = context
        self.stream_provider = stream_provider
        self.engine = engine
        self.dimension_function = dimension_function
        self._dimensions = None
        self._error = None

    def resolve(self):
        # A failed attempt is remembered and raised again, never retried.
        if self._error is not None:
            raise self._error
        if self._dimensions is None:
            try:
                self._dimensions = self._compute()
            except Exception as err:
                self._error = err
                raise
        return self._dimensions

    def _compute(self):
        ident, base_url = self.context.id, self.context.base_url

        if self.dimension_function is None:
            return self.probe()

        logger.debug('Attempting to use dimension_function to retrieve dimensions for %r', ident)
        dims = self.dimension_function(ident, base_url)
        if not dims:
            logger.warning(
                'Unable to get dimensions for %s using custom function. '
                'Falling back to the raster engine.', ident
            )
            return self.probe()
        return _normalize(dims)

    def probe(self):
        """The default strategy: read the source and ask the raster engine."""
        ident, base_url = self.context.id, self.context.base_url

        def read_metadata(stream):
            try:
                return self.engine.probe(stream)
            except (OSError, ValueError) as err:
                logger.warning('Error probing %s: %r', ident, err)
                raise DimensionResolutionError(
                    'Could not read image metadata for identifier: %s' % (ident,)
                ) from err

        width, height, pages = self.stream_provider.with_stream(ident, base_url, read_metadata)
        logger.debug('%s is %dx%d with %d page(s)', ident, width, height, pages)
        return pyramid(width, height, pages)
