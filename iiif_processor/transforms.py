from io import BytesIO
from logging import getLogger

from PIL import Image
from PIL.ImageOps import mirror

from iiif_processor.constants import PIL_FORMATS
from iiif_processor.exceptions import TransformException

logger = getLogger(__name__)

# Encoder settings per output format, overridable with raster_options.
# see http://pillow.readthedocs.org/en/latest/handbook/image-file-formats.html
SAVE_OPTIONS = {
    'jpg': {'quality': 90},
    'png': {'optimize': True},
    'webp': {'quality': 90},
}

# Output formats that can carry an alpha channel.
ALPHA_FORMATS = ('png', 'webp')


def _seekable(stream):
    try:
        if stream.seekable():
            return stream
    except AttributeError:
        pass
    return BytesIO(stream.read())


class PillowEngine(object):
    '''Raster engine built on Pillow.

    ``probe`` reads the size and number of resolution levels of a source;
    ``render`` runs a resolved Pipeline over it and returns encoded bytes.
    '''

    def __init__(self, dither_bitonal_images=True):
        self.dither_bitonal_images = dither_bitonal_images
        logger.debug('Initialized %s.%s', __name__, self.__class__.__name__)

    def probe(self, stream):
        '''
        Returns:
            (int, int, int): width, height and number of pages.
        '''
        im = Image.open(_seekable(stream))
        pages = getattr(im, 'n_frames', 1)
        return im.width, im.height, pages

    def render(self, stream, pipeline):
        '''
        Args:
            stream: readable binary stream of the source image.
            pipeline (Pipeline)
        Returns:
            bytes
        Raises:
            TransformException
        '''
        try:
            return self._render(stream, pipeline)
        except (OSError, ValueError, EOFError) as err:
            logger.error('Pillow transform error: %s', err)
            raise TransformException('error generating derivative image: %s' % (err,)) from err

    def _render(self, stream, pipeline):
        im = Image.open(_seekable(stream))
        source_info = dict(im.info)

        page = pipeline.page()
        if page:
            logger.debug('Reading pyramid page %d', page)
            im.seek(page)

        box = pipeline.region_box(im.width, im.height)
        if box != (0, 0, im.width, im.height):
            # For PIL: "The box is a 4-tuple defining the left, upper, right,
            # and lower pixel coordinate."
            logger.debug('cropping to: %r', box)
            im = im.crop(box)

        size = (pipeline.size.width, pipeline.size.height)
        if im.size != size:
            logger.debug('Resizing to: %r', size)
            im = im.resize(size, resample=Image.Resampling.LANCZOS)

        rotation = pipeline.rotation
        fmt = pipeline.format.extension
        quality = pipeline.quality.quality

        if rotation.mirror:
            im = mirror(im)

        if rotation.degrees % 360 != 0:
            # We need to convert here and not below if we want a
            # transparent background (A == Alpha layer). Bitonal output has none.
            if rotation.degrees % 90 != 0.0 and fmt in ALPHA_FORMATS and quality != 'bitonal':
                im = im.convert('LA' if quality == 'gray' else 'RGBA')
            im = im.rotate(0 - rotation.degrees, expand=True)

        im = self._apply_quality(im, quality, fmt)
        return self._encode(im, pipeline, source_info)

    def _apply_quality(self, im, quality, fmt):
        if quality == 'bitonal':
            # the dithering converter only reads L and RGB; alpha is dropped
            if im.mode not in ('L', 'RGB'):
                im = im.convert('L')
            dither = Image.Dither.FLOYDSTEINBERG if self.dither_bitonal_images else Image.Dither.NONE
            return im.convert('1', dither=dither)

        # Transparency survives only when the output format can hold it.
        if im.mode.endswith('A') and fmt in ALPHA_FORMATS:
            if quality == 'gray' and im.mode != 'LA':
                im = im.convert('LA')
            return im

        if quality == 'gray':
            return im.convert('L')
        if im.mode != 'RGB':
            return im.convert('RGB')
        return im

    def _encode(self, im, pipeline, source_info):
        fmt = pipeline.format.extension
        options = dict(SAVE_OPTIONS.get(fmt, {}))
        density = pipeline.format.density
        if density:
            # the PDF encoder reads resolution, the raster encoders read dpi
            if fmt == 'pdf':
                options['resolution'] = float(density)
            else:
                options['dpi'] = (density, density)

        # Drop whatever the source carried; put it back only if asked to.
        im.info = {}
        if pipeline.include_metadata:
            for key in ('exif', 'icc_profile'):
                if source_info.get(key):
                    options[key] = source_info[key]

        options.update(pipeline.raster_options)

        buf = BytesIO()
        im.save(buf, format=PIL_FORMATS[fmt], **options)
        logger.debug('Encoded %d bytes of %s', buf.tell(), fmt)
        return buf.getvalue()
