# parameters.py
# -*- coding: utf-8 -*-

'''
IIIF Image API parameters as objects.

:func:`build_pipeline` resolves the region, size, rotation, quality and format
slices of a request against the image's dimensions in one pass, in that order,
each step working from the output of the one before. The resulting
:class:`Pipeline` carries plain numbers, so the raster engine never needs to
look at IIIF syntax.
'''

from decimal import Decimal, InvalidOperation
from logging import getLogger
from math import floor
import re

import attr

from iiif_processor.constants import (
    FORMATS_BY_EXTENSION, FULL_MODE, PCT_MODE, PIXEL_MODE, SQUARE_MODE,
)
from iiif_processor.exceptions import (
    ConfigError,
    InvalidFormatError,
    InvalidQualityError,
    InvalidRegionError,
    InvalidRotationError,
    InvalidSizeError,
)
from iiif_processor.versions.grammar import scale_extent

logger = getLogger(__name__)

DECIMAL_HUNDRED = Decimal('100')

REGION_RE = re.compile(
    r'^(?P<pct>pct:)?(?P<x>[\d.]+),(?P<y>[\d.]+),(?P<w>[\d.]+),(?P<h>[\d.]+)$'
)
SIZE_RE = re.compile(
    r'^(?:pct:(?P<pct>[\d.]+)|(?P<best>!)?(?P<w>\d*),(?P<h>\d*))$'
)
ROTATION_RE = re.compile(r'^(?P<mirror>!?)(?P<rotation>[\d.]+)$')


def _optional_int(value):
    return None if value in (None, '') else int(value)


@attr.s(slots=True, frozen=True)
class MaxConstraint(object):
    """Largest output size the server is willing to produce.

    A height limit without a width limit is a configuration error.
    """
    width = attr.ib(default=None, converter=_optional_int)
    height = attr.ib(default=None, converter=_optional_int)

    def __attrs_post_init__(self):
        if self.height is not None and self.width is None:
            raise ConfigError('max height cannot be specified without max width')
        for dim in (self.width, self.height):
            if dim is not None and dim <= 0:
                raise ConfigError('max width and height must be positive (%r)' % (dim,))

    @classmethod
    def from_value(cls, value):
        """Accept None, a MaxConstraint or a ``{'width', 'height'}`` mapping."""
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(width=value.get('width'), height=value.get('height'))
        except AttributeError:
            raise ConfigError('max size must be a mapping with width/height, not %r' % (value,))

    def constrain(self, width, height):
        '''Shrink (width, height) proportionally so it fits, flooring the
        dimension that is scaled.
        '''
        if self.width is not None and width > self.width:
            height = scale_extent(height, self.width, width)
            width = self.width
        if self.height is not None and height > self.height:
            width = scale_extent(width, self.height, height)
            height = self.height
        return width, height


@attr.s(slots=True, frozen=True)
class RegionStep(object):
    '''The region of the source image to work from, in native pixels.'''
    mode = attr.ib()
    x = attr.ib()
    y = attr.ib()
    width = attr.ib()
    height = attr.ib()
    full = attr.ib()


@attr.s(slots=True, frozen=True)
class SizeStep(object):
    '''Output width and height of the region.'''
    width = attr.ib()
    height = attr.ib()


@attr.s(slots=True, frozen=True)
class RotationStep(object):
    '''
    See http://iiif.io/api/image/2.1/#rotation:

       A leading exclamation mark ("!") indicates that the image should be
       mirrored by reflection on the vertical axis before any rotation is
       applied. The numerical value represents the number of degrees of
       clockwise rotation, and may be any floating point number from 0 to 360.
    '''
    degrees = attr.ib()
    mirror = attr.ib()
    canonical = attr.ib()


@attr.s(slots=True, frozen=True)
class QualityStep(object):
    quality = attr.ib()

    @property
    def canonical(self):
        return self.quality


@attr.s(slots=True, frozen=True)
class FormatStep(object):
    extension = attr.ib()
    media_type = attr.ib()
    density = attr.ib(default=None)

    @property
    def canonical(self):
        return self.extension


@attr.s(slots=True, frozen=True)
class Pipeline(object):
    '''Fully resolved transformation of one request.

    Slots:
        bundle (VersionBundle): decides how the canonical path is written.
        dimensions (tuple(Dimensions)): native size, then pyramid levels.
        region (RegionStep)
        size (SizeStep)
        rotation (RotationStep)
        quality (QualityStep)
        format (FormatStep)
        include_metadata (bool): keep EXIF/ICC data of the source.
        raster_options (dict): extra encoder options for the raster engine.
    '''
    bundle = attr.ib()
    dimensions = attr.ib(converter=tuple)
    region = attr.ib()
    size = attr.ib()
    rotation = attr.ib()
    quality = attr.ib()
    format = attr.ib()
    include_metadata = attr.ib(default=False)
    raster_options = attr.ib(default=attr.Factory(dict))

    def canonical_path(self):
        return self.bundle.canonical_path(self)

    def page(self):
        '''Index of the smallest pyramid level that still has enough pixels
        for the requested output size.
        '''
        native = self.dimensions[0]
        for page in range(len(self.dimensions) - 1, 0, -1):
            level = self.dimensions[page]
            if level.width == 0 or level.height == 0:
                continue
            region_w = self.region.width * level.width // native.width
            region_h = self.region.height * level.height // native.height
            if region_w >= self.size.width and region_h >= self.size.height:
                return page
        return 0

    def region_box(self, page_width, page_height):
        '''The crop box ``(left, upper, right, lower)`` of the region in a
        decoded page of the given size.
        '''
        native = self.dimensions[0]
        left = self.region.x * page_width // native.width
        upper = self.region.y * page_height // native.height
        right = min(page_width, left + scale_extent(self.region.width, page_width, native.width))
        lower = min(page_height, upper + scale_extent(self.region.height, page_height, native.height))
        return (left, upper, right, lower)


def _region_mode(token, width, height):
    if token == FULL_MODE:
        return FULL_MODE
    if token == SQUARE_MODE:
        return SQUARE_MODE
    if token.startswith('pct:'):
        return PCT_MODE
    if token == '0,0,%d,%d' % (width, height):
        return FULL_MODE
    return PIXEL_MODE


def resolve_region(token, native, clamp=True):
    '''
    Args:
        token (str): the region slice of the request.
        native (Dimensions): full size of the image.
        clamp (bool): crop a partly out of bounds region to the image rather
            than rejecting it.
    Returns:
        RegionStep
    Raises:
        InvalidRegionError
    '''
    width, height = native.width, native.height
    mode = _region_mode(token, width, height)
    logger.debug('Region mode is "%s" (from "%s")', mode, token)

    if mode == FULL_MODE:
        return RegionStep(mode, 0, 0, width, height, True)

    if mode == SQUARE_MODE:
        if width > height:
            x, y, w, h = (width - height) // 2, 0, height, height
        else:
            x, y, w, h = 0, (height - width) // 2, width, width
    else:
        match = REGION_RE.match(token)
        if not match:
            raise InvalidRegionError('Region syntax "%s" is not valid' % (token,))
        values = [match.group(k) for k in ('x', 'y', 'w', 'h')]

        if mode == PCT_MODE:
            try:
                pcts = [Decimal(v) for v in values]
            except InvalidOperation:
                raise InvalidRegionError('Region syntax "%s" is not valid' % (token,))
            if any(n > DECIMAL_HUNDRED for n in pcts):
                raise InvalidRegionError('Region percentages must be less than or equal to 100.')
            if any(n <= 0 for n in pcts[2:]):
                raise InvalidRegionError('Width and Height Percentages must be greater than 0.')
            px, py, pw, ph = pcts
            x = int(floor(px * width / DECIMAL_HUNDRED))
            y = int(floor(py * height / DECIMAL_HUNDRED))
            w = int(floor(pw * width / DECIMAL_HUNDRED))
            h = int(floor(ph * height / DECIMAL_HUNDRED))
        else:
            if not all(v.isdigit() for v in values):
                raise InvalidRegionError('Pixel regions must be whole numbers (%s)' % (token,))
            x, y, w, h = map(int, values)

    if w <= 0 or h <= 0:
        raise InvalidRegionError('Region width and height must be greater than 0 (%s)' % (token,))
    if x >= width:
        raise InvalidRegionError(
            'Region x parameter is greater than the width of the image.\n'
            'Image width is %d' % (width,)
        )
    if y >= height:
        raise InvalidRegionError(
            'Region y parameter is greater than the height of the image.\n'
            'Image height is %d' % (height,)
        )

    if x + w > width or y + h > height:
        if not clamp:
            raise InvalidRegionError('Region %s is outside the image bounds' % (token,))
        w = min(w, width - x)
        h = min(h, height - y)
        logger.info('Region %s adjusted to %d,%d,%d,%d', token, x, y, w, h)

    full = (x, y, w, h) == (0, 0, width, height)
    return RegionStep(mode, x, y, w, h, full)


def resolve_size(token, region, bundle, max_size=None):
    '''
    Args:
        token (str): the size slice of the request.
        region (RegionStep): the resolved region; sizes are relative to it.
        bundle (VersionBundle): supplies keywords and the upscaling rule.
        max_size (MaxConstraint)
    Returns:
        SizeStep
    Raises:
        InvalidSizeError
    '''
    upscale = False
    if bundle.upscale_prefix and token.startswith(bundle.upscale_prefix):
        upscale = True
        token = token[len(bundle.upscale_prefix):]

    rw, rh = region.width, region.height

    if token in bundle.size_keywords:
        w, h = rw, rh
        if upscale and max_size is not None and max_size.width is not None:
            max_h = max_size.height if max_size.height is not None else max_size.width
            # the largest size that fits inside the limits, even above the region
            if max_size.width * rh <= max_h * rw:
                w, h = max_size.width, scale_extent(rh, max_size.width, rw)
            else:
                w, h = scale_extent(rw, max_h, rh), max_h
    else:
        match = SIZE_RE.match(token)
        if not match:
            raise InvalidSizeError('Size syntax "%s" is not valid' % (token,))
        groups = match.groupdict()

        if groups['pct'] is not None:
            try:
                pct = Decimal(groups['pct'])
            except InvalidOperation:
                raise InvalidSizeError('Size syntax "%s" is not valid' % (token,))
            if pct <= 0:
                raise InvalidSizeError('Percentage supplied is less than 0 (%s).' % (token,))
            # teeny, tiny requests still get a pixel
            w = max(1, int(floor(rw * pct / DECIMAL_HUNDRED)))
            h = max(1, int(floor(rh * pct / DECIMAL_HUNDRED)))
        else:
            req_w = _optional_int(groups['w'])
            req_h = _optional_int(groups['h'])
            if req_w is None and req_h is None:
                raise InvalidSizeError('Size syntax "%s" is not valid' % (token,))
            if any(d is not None and d <= 0 for d in (req_w, req_h)):
                raise InvalidSizeError('Width and height must both be positive numbers')

            if groups['best']:
                if req_w is None or req_h is None:
                    raise InvalidSizeError('Best fit sizes need a width and a height (%s)' % (token,))
                if req_w * rh <= req_h * rw:
                    w, h = req_w, scale_extent(rh, req_w, rw)
                else:
                    w, h = scale_extent(rw, req_h, rh), req_h
            elif req_h is None:
                w, h = req_w, scale_extent(rh, req_w, rw)
            elif req_w is None:
                w, h = scale_extent(rw, req_h, rh), req_h
            else:
                w, h = req_w, req_h

    if (w > rw or h > rh) and not bundle.allows_upscaling(upscale):
        raise InvalidSizeError(
            'Size %s is larger than the region (%dx%d); upscaling needs "%s"'
            % (token, rw, rh, bundle.upscale_prefix)
        )

    if max_size is not None:
        w, h = max_size.constrain(w, h)

    logger.debug('Resolved size %s to %dx%d', token, w, h)
    return SizeStep(w, h)


def resolve_rotation(token):
    '''
    Raises:
        InvalidRotationError
    '''
    match = ROTATION_RE.match(token)
    if not match:
        raise InvalidRotationError('Rotation parameter %r is not a number' % (token,))

    mirror = bool(match.group('mirror'))
    try:
        degrees = float(match.group('rotation'))
    except ValueError:
        raise InvalidRotationError('Rotation parameter %r is not a floating point number' % (token,))

    if not 0.0 <= degrees <= 360.0:
        raise InvalidRotationError('Rotation parameter %r is not between 0 and 360' % (token,))

    canonical = '%g' % (degrees,)
    if mirror:
        canonical = '!%s' % (canonical,)
    logger.debug('Canonical rotation parameter is %s', canonical)
    return RotationStep(degrees, mirror, canonical)


def resolve_quality(token, bundle):
    if token not in bundle.qualities:
        raise InvalidQualityError('"%s" is not a supported quality' % (token,))
    return QualityStep(token)


def resolve_format(token, bundle, density=None):
    if token not in bundle.formats or token not in FORMATS_BY_EXTENSION:
        raise InvalidFormatError('"%s" is not a supported format' % (token,))
    return FormatStep(token, FORMATS_BY_EXTENSION[token], density)


def build_pipeline(bundle, dimensions, region, size, rotation, quality, fmt,
                   max_size=None, density=None, include_metadata=False,
                   raster_options=None):
    '''Resolve every slice of an image request.

    Args:
        bundle (VersionBundle)
        dimensions (tuple(Dimensions)): the DimensionSet; element 0 is the
            native size everything is validated against.
        region, size, rotation, quality, fmt (str): raw request slices.
        max_size (MaxConstraint)
        density (number): pixel density (dpi) to write into the output.
        include_metadata (bool)
        raster_options (dict)
    Returns:
        Pipeline
    Raises:
        InvalidRegionError, InvalidSizeError, InvalidRotationError,
        InvalidQualityError, InvalidFormatError
    '''
    region_step = resolve_region(region, dimensions[0], clamp=bundle.clamp_region)
    size_step = resolve_size(size, region_step, bundle, max_size)
    rotation_step = resolve_rotation(rotation)
    quality_step = resolve_quality(quality, bundle)
    format_step = resolve_format(fmt, bundle, density)

    return Pipeline(
        bundle=bundle,
        dimensions=dimensions,
        region=region_step,
        size=size_step,
        rotation=rotation_step,
        quality=quality_step,
        format=format_step,
        include_metadata=bool(include_metadata),
        raster_options=dict(raster_options or {}),
    )
