#-*- coding: utf-8 -*-
'''
webapp.py
=========
WSGI adapter: hands each request URL to a :class:`Processor` and turns the
resulting envelope, or error, into a werkzeug response. Serving it is left to
whatever WSGI server hosts the application.
'''
from logging import getLogger
import re

from werkzeug.wrappers import Request, Response

from iiif_processor.config import (
    configure_logging, load_stream_provider, processor_options, read_config,
)
from iiif_processor.exceptions import (
    IIIFException,
    RequestException,
    StreamResolutionError,
    UnsupportedVersionError,
    VersionResolutionError,
)
from iiif_processor.processor import Processor

logger = getLogger(__name__)


def create_app(config_file_path):
    return IIIFApp(read_config(config_file_path))


class IIIFResponse(Response):
    '''Response with the CORS headers a IIIF viewer needs.
    '''
    def set_acao(self, request, regex=None):
        if regex:
            if regex.search(request.url_root):
                self.headers['Access-Control-Allow-Origin'] = request.url_root
        else:
            self.headers['Access-Control-Allow-Origin'] = '*'
        self.headers['Access-Control-Allow-Methods'] = 'GET, OPTIONS'
        self.headers['Access-Control-Allow-Headers'] = 'Authorization'


class ErrorResponse(IIIFResponse):
    LABELS = {400: 'Bad Request', 404: 'Not Found', 500: 'Server Side Error'}

    def __init__(self, message, status):
        message = '%s: %s (%d)' % (self.LABELS[status], message, status)
        super(ErrorResponse, self).__init__(message, status, content_type='text/plain')


def status_for(error):
    if isinstance(error, (RequestException, VersionResolutionError, UnsupportedVersionError)):
        return 400
    if isinstance(error, StreamResolutionError):
        return 404
    return 500


def request_url(request):
    '''The request URL with its path unescaped, as the IIIF grammar reads it.'''
    return '%s%s%s' % (request.host_url.rstrip('/'), request.script_root, request.path)


def envelope_to_response(envelope):
    r = IIIFResponse(envelope.body, status=200, content_type=envelope.content_type)
    links = []
    if envelope.canonical_link:
        links.append('<%s>;rel="canonical"' % (envelope.canonical_link,))
    if envelope.profile_link:
        links.append('<%s>;rel="profile"' % (envelope.profile_link,))
    if links:
        r.headers['Link'] = ','.join(links)
    return r


class IIIFApp(object):

    def __init__(self, app_configs):
        '''The WSGI Application.
        Args:
            app_configs ({}):
                A dictionary of dictionaries that represents the config file.
        '''
        self.app_configs = app_configs
        self.logger = configure_logging(app_configs['logging'])
        self.stream_provider = load_stream_provider(app_configs)
        self.options = processor_options(app_configs)

        cors_regex = app_configs.get('webapp', {}).get('cors_regex')
        self.cors_regex = re.compile(cors_regex) if cors_regex else None
        self.logger.debug('IIIFApp initialized with processor options %r', self.options)

    def route(self, request):
        if request.method == 'OPTIONS':
            r = IIIFResponse(status=200)
            r.set_acao(request, self.cors_regex)
            return r

        try:
            processor = Processor(request_url(request), self.stream_provider, **self.options)
            envelope = processor.execute()
        except IIIFException as err:
            status = status_for(err)
            if status == 500:
                self.logger.error('Error serving %s: %r', request.path, err)
            else:
                self.logger.info('Could not serve %s: %s', request.path, err)
            r = ErrorResponse(str(err), status)
        else:
            r = envelope_to_response(envelope)

        r.set_acao(request, self.cors_regex)
        return r

    def wsgi_app(self, environ, start_response):
        request = Request(environ)
        response = self.route(request)
        return response(environ, start_response)

    def __call__(self, environ, start_response):
        '''
        This makes the application a WSGI callable.
        '''
        return self.wsgi_app(environ, start_response)
