# -*- encoding: utf-8 -*-
"""
Path syntax shared by the IIIF Image API versions.

Both v2 and v3 requests have the shape

    {identifier}/info.json
    {identifier}/{region}/{size}/{rotation}/{quality}.{format}

and only differ in which tokens each slice accepts. Tokens are validated here
but interpreted later, by :mod:`iiif_processor.parameters`.
"""
from logging import getLogger
import re
from urllib.parse import unquote

import attr

from iiif_processor.constants import FORMATS_BY_EXTENSION, QUALITIES
from iiif_processor.exceptions import MalformedUrlError

logger = getLogger(__name__)

_NUMBER = r'\d+(?:\.\d+)?'

REGION = r'full|square|(?:pct:)?%s,%s,%s,%s' % ((_NUMBER,) * 4)
ROTATION = r'!?%s' % (_NUMBER,)
QUALITY = '|'.join(QUALITIES)
FORMAT = '|'.join(sorted(FORMATS_BY_EXTENSION))


@attr.s(slots=True, frozen=True)
class InfoRequest(object):
    """A request for the ``info.json`` document of an image."""
    id = attr.ib()

    info = True


@attr.s(slots=True, frozen=True)
class ImageRequest(object):
    """A request for a derivative image. Every slice is the raw token."""
    id = attr.ib()
    region = attr.ib()
    size = attr.ib()
    rotation = attr.ib()
    quality = attr.ib()
    format = attr.ib()

    info = False


def path_parser(size_pattern):
    """Build a ``parse_path`` function for the given size grammar.

    Args:
        size_pattern (str): regex alternatives accepted in the size slice.
    Returns:
        function: ``parse_path(path) -> InfoRequest | ImageRequest``
    """
    image_re = re.compile(
        r'^/?(?P<id>.+?)/(?P<region>%s)/(?P<size>%s)/(?P<rotation>%s)/'
        r'(?P<quality>%s)\.(?P<format>%s)$'
        % (REGION, size_pattern, ROTATION, QUALITY, FORMAT)
    )
    info_re = re.compile(r'^/?(?P<id>.+?)/info\.json$')

    def parse_path(path):
        image_match = image_re.match(path)
        if image_match:
            groups = image_match.groupdict()
            groups['id'] = unquote(groups['id'])
            return ImageRequest(**groups)

        info_match = info_re.match(path)
        if info_match:
            return InfoRequest(id=unquote(info_match.group('id')))

        logger.debug('Path %r does not match the IIIF syntax', path)
        raise MalformedUrlError('request path does not match the IIIF syntax: %s' % (path,))

    return parse_path


def canonical_path(pipeline):
    """``{region}/{size}/{rotation}/{quality}.{format}`` from a resolved pipeline."""
    bundle = pipeline.bundle
    return '%s/%s/%s/%s.%s' % (
        bundle.canonical_region(pipeline.region),
        bundle.canonical_size(pipeline.size, pipeline.region),
        pipeline.rotation.canonical,
        pipeline.quality.canonical,
        pipeline.format.canonical,
    )


def canonical_region(region):
    if region.full:
        return 'full'
    return '%d,%d,%d,%d' % (region.x, region.y, region.width, region.height)


def scale_extent(extent, numerator, denominator):
    """``floor(extent * numerator / denominator)``, but never less than 1."""
    return max(1, extent * numerator // denominator)


def max_attributes(max_size):
    if max_size is None:
        return None, None
    return max_size.width, max_size.height
