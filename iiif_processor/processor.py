# -*- encoding: utf-8 -*-
'''
processor.py
============
Top level of a IIIF Image API request: one :class:`Processor` per request URL.

    processor = Processor(url, FilesystemStreamProvider({'src_img_root': '/images'}))
    response = processor.execute()
    response.content_type, response.body
'''
from logging import getLogger
from urllib.parse import quote, urljoin

import attr

from iiif_processor.constants import INFO_JSON, JSON_CONTENT_TYPE
from iiif_processor.dimensions import DimensionResolver
from iiif_processor.exceptions import ConfigError
from iiif_processor.info import build_info_document, serialize_info
from iiif_processor.parameters import MaxConstraint, build_pipeline
from iiif_processor.request import parse_request
from iiif_processor.streams import as_stream_provider
from iiif_processor.transforms import PillowEngine

logger = getLogger(__name__)


@attr.s(slots=True, frozen=True)
class ResponseEnvelope(object):
    """What the processor hands back: a body plus how to describe it.

    ``body`` is JSON text for info requests and encoded image bytes otherwise.
    """
    content_type = attr.ib()
    body = attr.ib()
    canonical_link = attr.ib(default=None)
    profile_link = attr.ib(default=None)


class Processor(object):

    def __init__(self, url, stream_provider, iiif_version=None, path_prefix=None,
                 max_size=None, include_metadata=False, density=None,
                 dimension_function=None, raster_options=None, engine=None):
        '''
        Args:
            url (str): the full request URL.
            stream_provider (StreamProvider or callable): supplies the source
                image; a plain callable is used as a SimpleStreamProvider.
            iiif_version (str): skip reading the version from the URL.
            path_prefix (str): path between host and IIIF request,
                ``iiif/<version>/`` by default.
            max_size (MaxConstraint or dict): largest output size.
            include_metadata (bool): keep EXIF/ICC data in derivatives.
            density (number): pixel density (dpi) written into derivatives.
            dimension_function (callable): custom ``(id, base_url)`` size
                lookup, with the raster engine as fallback.
            raster_options (dict): extra encoder options.
            engine: raster engine; a PillowEngine by default.
        Raises:
            ConfigError, VersionResolutionError, UnsupportedVersionError,
            MalformedUrlError
        '''
        if stream_provider is None:
            raise ConfigError('stream_provider must be specified')
        self.stream_provider = as_stream_provider(stream_provider)
        self.max_size = MaxConstraint.from_value(max_size)
        if dimension_function is not None and not callable(dimension_function):
            raise ConfigError('dimension_function must be callable')

        self.include_metadata = bool(include_metadata)
        self.density = density
        self.raster_options = dict(raster_options or {})
        self.engine = engine or PillowEngine()

        self.context = parse_request(url, iiif_version, path_prefix)
        self.bundle = self.context.bundle
        self.dimension_resolver = DimensionResolver(
            self.context, self.stream_provider, self.engine, dimension_function
        )

    @property
    def filename(self):
        return self.context.filename

    def dimensions(self):
        return self.dimension_resolver.resolve()

    def info_json(self):
        native = self.dimensions()[0]
        doc = build_info_document(
            self.bundle, self.context.info_id, native, self.max_size
        )
        return ResponseEnvelope(content_type=JSON_CONTENT_TYPE, body=serialize_info(doc))

    def pipeline(self):
        request = self.context.request
        return build_pipeline(
            self.bundle,
            self.dimensions(),
            request.region,
            request.size,
            request.rotation,
            request.quality,
            request.format,
            max_size=self.max_size,
            density=self.density,
            include_metadata=self.include_metadata,
            raster_options=self.raster_options,
        )

    def canonical_url(self, pipeline):
        path = '%s/%s' % (quote(self.context.id, safe=''), pipeline.canonical_path())
        return urljoin(self.context.base_url, path)

    def iiif_image(self):
        pipeline = self.pipeline()
        ident, base_url = self.context.id, self.context.base_url

        body = self.stream_provider.with_stream(
            ident, base_url, lambda stream: self.engine.render(stream, pipeline)
        )
        logger.debug('returning %d bytes for %s', len(body), ident)

        return ResponseEnvelope(
            content_type=pipeline.format.media_type,
            body=body,
            canonical_link=self.canonical_url(pipeline),
            profile_link=self.bundle.profile_link,
        )

    def execute(self):
        if self.filename == INFO_JSON:
            return self.info_json()
        return self.iiif_image()
