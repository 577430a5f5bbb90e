# -*- encoding: utf-8 -*-
"""
Registry of IIIF Image API version implementations.

Everything that depends on the literal syntax of one version of the API
lives in a :class:`VersionBundle`; the rest of the package only talks to
bundles through the attributes declared here.
"""
from logging import getLogger
from types import MappingProxyType

import attr

from iiif_processor.constants import FORMATS_BY_EXTENSION, QUALITIES
from iiif_processor.exceptions import ConfigError, UnsupportedVersionError
from iiif_processor.versions import grammar, v2, v3

logger = getLogger(__name__)

_is_callable = attr.validators.is_callable()


@attr.s(slots=True, frozen=True)
class VersionBundle(object):
    """Version specific behaviour.

    Attributes:
        version (str): e.g. ``'2'``.
        profile_link (str): the compliance URI sent as the profile link.
        parse_path (callable): ``path -> InfoRequest | ImageRequest``.
        info_document (callable): builds the version shaped info document.
        canonical_size (callable): ``(SizeStep, RegionStep) -> str``.
        canonical_region (callable): ``RegionStep -> str``.
        canonical_path (callable): ``Pipeline -> str``.
        size_keywords (tuple): size tokens meaning "the region, unscaled".
        upscale_prefix (str): marker required on sizes larger than the
            region, or None when upscaling is always allowed.
        clamp_region (bool): whether a region partly outside the image is
            cropped to the image bounds (True) or rejected (False).
    """
    version = attr.ib()
    profile_link = attr.ib()
    parse_path = attr.ib(validator=_is_callable)
    info_document = attr.ib(validator=_is_callable)
    canonical_size = attr.ib(validator=_is_callable)
    canonical_region = attr.ib(default=grammar.canonical_region, validator=_is_callable)
    canonical_path = attr.ib(default=grammar.canonical_path, validator=_is_callable)
    size_keywords = attr.ib(default=('max',), converter=tuple)
    upscale_prefix = attr.ib(default=None)
    clamp_region = attr.ib(default=True)
    qualities = attr.ib(default=QUALITIES, converter=tuple)
    formats = attr.ib(default=tuple(sorted(FORMATS_BY_EXTENSION)), converter=tuple)

    def allows_upscaling(self, upscale_requested):
        return self.upscale_prefix is None or upscale_requested


_registry = {}

REGISTRY = MappingProxyType(_registry)


def register(bundle):
    if not isinstance(bundle, VersionBundle):
        raise ConfigError('%r is not a VersionBundle' % (bundle,))
    _registry[str(bundle.version)] = bundle
    logger.debug('Registered IIIF Image API v%s', bundle.version)
    return bundle


def get_bundle(version):
    try:
        return _registry[str(version)]
    except KeyError:
        raise UnsupportedVersionError(
            'No implementation found for IIIF Image API v%s' % (version,)
        )


register(VersionBundle(
    version=v2.VERSION,
    profile_link=v2.COMPLIANCE,
    parse_path=grammar.path_parser(v2.SIZE),
    info_document=v2.info_document,
    canonical_size=v2.canonical_size,
    size_keywords=v2.SIZE_KEYWORDS,
))

register(VersionBundle(
    version=v3.VERSION,
    profile_link=v3.COMPLIANCE,
    parse_path=grammar.path_parser(v3.SIZE),
    info_document=v3.info_document,
    canonical_size=v3.canonical_size,
    size_keywords=v3.SIZE_KEYWORDS,
    upscale_prefix=v3.UPSCALE_PREFIX,
))
