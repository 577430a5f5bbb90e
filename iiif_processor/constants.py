# constants.py
# -*- coding: utf-8 -*-

import re

PROTOCOL = 'http://iiif.io/api/image'

__formats = (
    ('gif', 'image/gif'),
    ('jp2', 'image/jp2'),
    ('jpg', 'image/jpeg'),
    ('pdf', 'application/pdf'),
    ('png', 'image/png'),
    ('tif', 'image/tiff'),
    ('webp', 'image/webp'),
)

FORMATS_BY_EXTENSION = dict(__formats)

QUALITIES = ('color', 'gray', 'bitonal', 'default')

# Pillow's encoder names for each output extension.
PIL_FORMATS = {
    'gif': 'GIF',
    'jp2': 'JPEG2000',
    'jpg': 'JPEG',
    'pdf': 'PDF',
    'png': 'PNG',
    'tif': 'TIFF',
    'webp': 'WEBP',
}

INFO_JSON = 'info.json'
JSON_CONTENT_TYPE = 'application/json'

# Sizes smaller than this (on either side) are not advertised in info.json.
MIN_PYRAMID_SIZE = 64

TILE_SIZE = 512

VERSION_RE = re.compile(r'^/iiif/(?P<version>\d)/')

FULL_MODE = 'full'
SQUARE_MODE = 'square'
PCT_MODE = 'pct'
PIXEL_MODE = 'pixel'
