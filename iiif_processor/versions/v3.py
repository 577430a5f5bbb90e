# -*- encoding: utf-8 -*-
'''
IIIF Image API 3.0 <https://iiif.io/api/image/3.0/>, level 2.

Differences from 2.x that matter here: ``full`` is no longer a size keyword,
sizes larger than the region need the ``^`` prefix, and the canonical size
is always ``w,h`` (or ``max``).
'''
import attr

from iiif_processor.constants import PROTOCOL, TILE_SIZE
from iiif_processor.versions import grammar

VERSION = '3'
COMPLIANCE = 'http://iiif.io/api/image/3/level2.json'
CONTEXT = 'http://iiif.io/api/image/3/context.json'

EXTRA_FORMATS = frozenset(['gif', 'jp2', 'pdf', 'tif', 'webp'])
EXTRA_QUALITIES = frozenset(['color', 'gray', 'bitonal'])
EXTRA_FEATURES = frozenset([
    'canonicalLinkHeader',
    'profileLinkHeader',
    'mirroring',
    'rotationArbitrary',
    'regionSquare',
    'sizeUpscaling',
])

SIZE = r'\^?(?:max|pct:\d+(?:\.\d+)?|!?\d+,\d+|\d+,|,\d+)'
SIZE_KEYWORDS = ('max',)
UPSCALE_PREFIX = '^'


def canonical_size(size, region):
    if (size.width, size.height) == (region.width, region.height):
        return 'max'
    if size.width > region.width or size.height > region.height:
        return '%s%d,%d' % (UPSCALE_PREFIX, size.width, size.height)
    return '%d,%d' % (size.width, size.height)


def info_document(id, width, height, sizes, max_size=None):
    max_width, max_height = grammar.max_attributes(max_size)
    return {
        '@context': CONTEXT,
        'id': id,
        'type': 'ImageService3',
        'protocol': PROTOCOL,
        'profile': 'level2',
        'width': width,
        'height': height,
        'maxWidth': max_width,
        'maxHeight': max_height,
        'sizes': [attr.asdict(s) for s in sizes],
        'tiles': [{
            'width': TILE_SIZE,
            'height': TILE_SIZE,
            'scaleFactors': [2 ** i for i in range(len(sizes) + 1)],
        }],
        'extraFormats': EXTRA_FORMATS,
        'extraQualities': EXTRA_QUALITIES,
        'extraFeatures': EXTRA_FEATURES,
    }
