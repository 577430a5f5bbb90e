# -*- encoding: utf-8 -*-
"""
The ``info.json`` image information document.
"""
from logging import getLogger
import json

from iiif_processor.constants import MIN_PYRAMID_SIZE
from iiif_processor.dimensions import Dimensions

logger = getLogger(__name__)


class InfoEncoder(json.JSONEncoder):
    """Serializes sets as sorted lists, so feature lists come out stable."""
    def default(self, obj):
        if isinstance(obj, (set, frozenset)):
            return sorted(obj)
        return json.JSONEncoder.default(self, obj)


def size_pyramid(width, height):
    """Sizes to advertise: the native size halved (and floored) until either
    side would drop below 64 pixels, smallest first. The native size itself
    is not included.
    """
    sizes = []
    width, height = width // 2, height // 2
    while width >= MIN_PYRAMID_SIZE and height >= MIN_PYRAMID_SIZE:
        sizes.append(Dimensions(width, height))
        width, height = width // 2, height // 2

    # OpenSeadragon expects the sizes in increasing order, even though the
    # API does not require it.
    sizes.reverse()
    return sizes


def build_info_document(bundle, id, native, max_size=None):
    '''
    Args:
        bundle (VersionBundle): shapes the document.
        id (str): the image's URI.
        native (Dimensions): full size of the image.
        max_size (MaxConstraint)
    Returns:
        dict: the document, without any top level ``None`` fields.
    '''
    doc = bundle.info_document(
        id=id,
        width=native.width,
        height=native.height,
        sizes=size_pyramid(native.width, native.height),
        max_size=max_size,
    )
    return dict((k, v) for k, v in doc.items() if v is not None)


def serialize_info(doc):
    return json.dumps(doc, cls=InfoEncoder)
