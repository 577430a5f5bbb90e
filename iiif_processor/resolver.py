"""
`resolver` -- Resolve Identifiers to Source Image Streams
=========================================================
"""
from contextlib import closing
from io import BytesIO
from logging import getLogger
from os.path import exists, join

import requests

from iiif_processor.exceptions import ConfigError, StreamResolutionError
from iiif_processor.streams import ScopedStreamProvider, SimpleStreamProvider

logger = getLogger(__name__)


class FilesystemStreamProvider(SimpleStreamProvider):
    """
    A constant path is prepended to the identifier to find the file; the
    first of the configured roots that has it wins.

    The config dictionary MUST contain either
     * `src_img_root`, a directory, or
     * `src_img_roots`, a list of directories.
    """

    def __init__(self, config):
        self.config = config
        if 'src_img_roots' in config:
            self.source_roots = list(config['src_img_roots'])
        elif 'src_img_root' in config:
            self.source_roots = [config['src_img_root']]
        else:
            raise ConfigError('FilesystemStreamProvider needs src_img_root or src_img_roots')

    def source_file_path(self, ident):
        for directory in self.source_roots:
            fp = join(directory, ident)
            if exists(fp):
                return fp

    def open_stream(self, ident, base_url):
        fp = self.source_file_path(ident)
        if fp is None:
            message = 'Source image not found for identifier: %s.' % (ident,)
            logger.warning(message)
            raise StreamResolutionError(message)
        logger.debug('Opening %s for identifier %s', fp, ident)
        return open(fp, 'rb')


class HTTPStreamProvider(ScopedStreamProvider):
    '''
    Reads source images from an http image store. The response is only open
    while the consumer runs.

    The config dictionary MAY contain
     * `source_prefix`, the url up to the identifier.
     * `source_suffix`, the url after the identifier (if applicable).
     * `uri_resolvable` with value True, allows one to use full uri's to
        resolve to an image.
     * `user`, the username to make the HTTP request as.
     * `pw`, the password to make the HTTP request as.
     * `ssl_check`, whether to check the validity of the origin server's HTTPS
        certificate.
     * `timeout`, in seconds (default 30).
    '''

    def __init__(self, config):
        self.config = config
        self.source_prefix = config.get('source_prefix', '')
        self.source_suffix = config.get('source_suffix', '')
        self.uri_resolvable = config.get('uri_resolvable', False)
        self.user = config.get('user', None)
        self.pw = config.get('pw', None)
        self.ssl_check = config.get('ssl_check', True)
        self.timeout = config.get('timeout', 30)

        if not self.uri_resolvable and self.source_prefix == '':
            message = 'Configuration incomplete and cannot resolve. Must either set ' \
                      'uri_resolvable or source_prefix settings.'
            logger.error(message)
            raise ConfigError(message)

    def request_options(self):
        # parameters to pass to all get requests
        options = {'verify': self.ssl_check, 'timeout': self.timeout}
        if self.user is not None and self.pw is not None:
            options['auth'] = (self.user, self.pw)
        return options

    def web_request_url(self, ident):
        if ident.startswith(('http://', 'https://')) and self.uri_resolvable:
            url = ident
        else:
            url = self.source_prefix + ident + self.source_suffix
        if not url.startswith(('http://', 'https://')):
            logger.warning('Bad URL request at %s for identifier: %s.', url, ident)
            raise StreamResolutionError(
                'Bad URL request made for identifier: %r.' % (ident,)
            )
        return url

    def stream_into(self, ident, base_url, consumer):
        url = self.web_request_url(ident)
        with closing(requests.get(url, stream=True, **self.request_options())) as response:
            if not response.ok:
                logger.warning(
                    'Source image not found at %s for identifier: %s. '
                    'Status code returned: %s.',
                    url, ident, response.status_code
                )
                raise StreamResolutionError(
                    'Source image not found for identifier: %s. '
                    'Status code returned: %s.' % (ident, response.status_code)
                )
            # Pillow needs to seek, so the body is buffered.
            with closing(BytesIO(response.content)) as stream:
                return consumer(stream)
