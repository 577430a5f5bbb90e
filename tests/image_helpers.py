'''
Test images, built in memory, and stream providers over them.
'''
from io import BytesIO

from PIL import Image

from iiif_processor.streams import ScopedStreamProvider, SimpleStreamProvider


def image_bytes(width, height, fmt='JPEG', mode='RGB', color=(200, 40, 40), **kwargs):
    """Encode a plain image of the given size."""
    im = Image.new(mode, (width, height), color)
    buf = BytesIO()
    im.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


def pyramid_tiff_bytes(width, height, levels):
    """A multi-page TIFF whose pages halve in size, like a pyramidal TIFF."""
    pages = [
        Image.new('RGB', (width // 2 ** level, height // 2 ** level), (10, 120, 200))
        for level in range(levels)
    ]
    buf = BytesIO()
    pages[0].save(buf, format='TIFF', save_all=True, append_images=pages[1:])
    return buf.getvalue()


def simple_provider(data):
    return SimpleStreamProvider(lambda ident, base_url: BytesIO(data))


def scoped_provider(data):
    def fn(ident, base_url, consumer):
        with BytesIO(data) as stream:
            return consumer(stream)
    return ScopedStreamProvider(fn)


def open_image(data):
    return Image.open(BytesIO(data))
