# -*- encoding: utf-8 -*-
'''
IIIF Image API 2.1 <http://iiif.io/api/image/2.1/>, level 2.
'''
import attr

from iiif_processor.constants import (
    FORMATS_BY_EXTENSION, PROTOCOL, QUALITIES, TILE_SIZE,
)
from iiif_processor.versions import grammar

VERSION = '2'
COMPLIANCE = 'http://iiif.io/api/image/2/level2.json'
CONTEXT = 'http://iiif.io/api/image/2/context.json'

OPTIONAL_FEATURES = frozenset([
    'canonicalLinkHeader',
    'profileLinkHeader',
    'mirroring',
    'rotationArbitrary',
    'regionSquare',
    'sizeAboveFull',
])

SIZE = r'full|max|pct:\d+(?:\.\d+)?|!?\d+,\d+|\d+,|,\d+'
SIZE_KEYWORDS = ('full', 'max')


def canonical_size(size, region):
    '''``full`` for the unscaled region, ``w,`` when the width alone gives back
    the same height, ``w,h`` otherwise.
    '''
    if (size.width, size.height) == (region.width, region.height):
        return 'full'
    if grammar.scale_extent(region.height, size.width, region.width) == size.height:
        return '%d,' % (size.width,)
    return '%d,%d' % (size.width, size.height)


def info_document(id, width, height, sizes, max_size=None):
    max_width, max_height = grammar.max_attributes(max_size)
    description = {
        'formats': frozenset(FORMATS_BY_EXTENSION),
        'qualities': frozenset(QUALITIES),
        'supports': OPTIONAL_FEATURES,
        'maxWidth': max_width,
        'maxHeight': max_height,
    }
    description = dict((k, v) for k, v in description.items() if v is not None)

    return {
        '@context': CONTEXT,
        '@id': id,
        'protocol': PROTOCOL,
        'width': width,
        'height': height,
        'sizes': [attr.asdict(s) for s in sizes],
        'tiles': [{
            'width': TILE_SIZE,
            'height': TILE_SIZE,
            'scaleFactors': [2 ** i for i in range(len(sizes) + 1)],
        }],
        'profile': [COMPLIANCE, description],
    }
