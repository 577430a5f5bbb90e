# -*- encoding: utf-8 -*-
"""
Turning a request URL into a :class:`RequestContext`.

In ``https://example.org/iiif/2/abc%2F123/full/max/0/default.jpg`` the base
URL is ``https://example.org/iiif/2/`` (host plus path prefix) and the rest,
``abc%2F123/full/max/0/default.jpg``, is parsed by the version bundle.
"""
from logging import getLogger
import re
from urllib.parse import quote, urlsplit, urlunsplit

import attr

from iiif_processor.constants import INFO_JSON, VERSION_RE
from iiif_processor.exceptions import MalformedUrlError, VersionResolutionError
from iiif_processor.versions import get_bundle

logger = getLogger(__name__)


def fixup_slashes(path, leave_one=False):
    """Strip leading and trailing slashes, or reduce them to exactly one."""
    if path is None:
        return None
    replacement = '/' if leave_one else ''
    return re.sub(r'/*$', replacement, re.sub(r'^/*', replacement, path, count=1), count=1)


def resolve_version(url, iiif_version=None, path_prefix=None):
    """Work out the IIIF version and the path prefix for a request.

    Args:
        url (str): the full request URL.
        iiif_version (str): explicit version; read from the URL when None.
        path_prefix (str): path between the host and the IIIF request;
            defaults to ``iiif/<version>/``.
    Returns:
        (str, str): the version and the normalized (``/.../``) prefix.
    Raises:
        VersionResolutionError
    """
    if not iiif_version:
        path = urlsplit(url).path
        match = VERSION_RE.match(path)
        if not match:
            raise VersionResolutionError(
                'Cannot determine IIIF version from path %s' % (path,)
            )
        iiif_version = match.group('version')
    iiif_version = str(iiif_version)
    if not path_prefix:
        path_prefix = 'iiif/%s/' % (iiif_version,)
    return iiif_version, fixup_slashes(path_prefix, leave_one=True)


@attr.s(slots=True, frozen=True)
class RequestContext(object):
    """Everything known about one request once its URL has been parsed."""
    version = attr.ib()
    path_prefix = attr.ib()
    base_url = attr.ib()
    request = attr.ib()

    @property
    def id(self):
        return self.request.id

    @property
    def bundle(self):
        return get_bundle(self.version)

    @property
    def filename(self):
        if self.request.info:
            return INFO_JSON
        return '%s.%s' % (self.request.quality, self.request.format)

    @property
    def info_id(self):
        """The image's ``@id``/``id``: base URL and quoted identifier."""
        return '/'.join((fixup_slashes(self.base_url), quote(self.id, safe='')))


def parse_request(url, iiif_version=None, path_prefix=None):
    """
    Raises:
        VersionResolutionError
        UnsupportedVersionError
        MalformedUrlError
    """
    version, path_prefix = resolve_version(url, iiif_version, path_prefix)
    bundle = get_bundle(version)

    scheme, netloc, path, _query, _fragment = urlsplit(url)
    bare_url = urlunsplit((scheme, netloc, path, '', ''))

    parser = re.compile(
        r'^(?P<base_url>https?://[^/]+%s)(?P<path>.+)$' % (re.escape(path_prefix),)
    )
    match = parser.match(bare_url)
    if not match:
        raise MalformedUrlError(
            'URL %s does not match the path prefix %s' % (url, path_prefix)
        )

    parsed = bundle.parse_path(match.group('path'))
    context = RequestContext(
        version=version,
        path_prefix=path_prefix,
        base_url=match.group('base_url'),
        request=parsed,
    )
    logger.debug('Parsed URL %s: %r', url, context)
    return context
