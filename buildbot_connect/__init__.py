#!/usr/bin/env python
# Software License Agreement (BSD License)
#
# Copyright (c) 2026, python-buildbot-connect authors.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions
# are met:
#
#  * Redistributions of source code must retain the above copyright
#    notice, this list of conditions and the following disclaimer.
#  * Redistributions in binary form must reproduce the above
#    copyright notice, this list of conditions and the following
#    disclaimer in the documentation and/or other materials provided
#    with the distribution.
#  * Neither the name of the copyright holders nor the names of its
#    contributors may be used to endorse or promote products derived
#    from this software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
# 'AS IS' AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
# LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS
# FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE
# COPYRIGHT OWNER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING,
# BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
# LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN
# ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.
#

'''
.. module:: buildbot_connect
    :platform: Unix, Windows
    :synopsis: Python API to interact with Buildbot
    :noindex:

Example::

    >>> import buildbot_connect
    >>> server = buildbot_connect.Buildbot('https://ci.example.com',
    ...                                    username='alice')
    >>> for builder in server.get_builders():
    ...     print(builder['name'])
'''

import itertools
import json
import logging
import os
from urllib.parse import quote, urljoin

import requests
import requests.exceptions as req_exc
from requests.packages.urllib3.exceptions import InsecureRequestWarning

from buildbot_connect import endpoints
from buildbot_connect import normalize
from buildbot_connect import session
from buildbot_connect.exceptions import AuthException  # noqa: F401
from buildbot_connect.exceptions import BuildbotException  # noqa: F401
from buildbot_connect.exceptions import CredentialDenied
from buildbot_connect.exceptions import MalformedChallenge  # noqa: F401
from buildbot_connect.exceptions import NotFoundException
from buildbot_connect.exceptions import ProtocolError
from buildbot_connect.exceptions import ServerError
from buildbot_connect.exceptions import TimeoutException
from buildbot_connect.exceptions import TransportError
from buildbot_connect.exceptions import UnsupportedAuthMode  # noqa: F401
from buildbot_connect.interfaces import ConsolePrompt  # noqa: F401
from buildbot_connect.interfaces import CredentialStore  # noqa: F401
from buildbot_connect.interfaces import MemoryCredentialStore  # noqa: F401
from buildbot_connect.interfaces import Prompt  # noqa: F401

# Set default logging handler to avoid "No handler found" warnings.
logging.getLogger(__name__).addHandler(logging.NullHandler())

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3
AUTH_STATUS_CODES = (401, 403)


class Buildbot(object):

    def __init__(self, url, username=None, password=None,
                 credential_store=None, prompt=None,
                 timeout=DEFAULT_TIMEOUT, allow_self_signed=False,
                 on_username=None):
        '''Create handle to a Buildbot instance.

        Requests are sent anonymously until the server asks for
        credentials. Methods raise :class:`BuildbotException` subclasses
        on failure and return ``None`` when the user declines to
        authenticate.

        :param url: URL of Buildbot server, ``str``
        :param username: Server username, ``str``
        :param password: Server password, ``str``; looked up in
            ``credential_store`` or asked through ``prompt`` when missing
        :param credential_store: secret storage,
            :class:`~buildbot_connect.interfaces.CredentialStore`
        :param prompt: user interaction,
            :class:`~buildbot_connect.interfaces.Prompt`
        :param timeout: Server connection timeout in secs, ``int``
        :param allow_self_signed: skip TLS certificate verification,
            ``bool``
        :param on_username: called with a user name entered at a prompt
        '''
        self.timeout = timeout
        self.prompt = prompt
        self._rpc_ids = itertools.count(1)
        self._session = requests.Session()

        extra_headers = os.environ.get('BUILDBOT_API_EXTRA_HEADERS', '')
        if extra_headers:
            logger.warning('BUILDBOT_API_EXTRA_HEADERS adds these HTTP '
                           'headers: %s', extra_headers.split('\n'))
        for token in extra_headers.split('\n'):
            if ':' in token:
                header, value = token.split(':', 1)
                self._session.headers[header] = value.strip()

        self.auth = session.SessionAuthController(
            self._normalize_url(url), self._send,
            username=username, password=password,
            credential_store=credential_store, prompt=prompt,
            verify=self._verify(allow_self_signed),
            on_username=on_username)

    @staticmethod
    def _normalize_url(url):
        if url[-1] == '/':
            return url
        return url + '/'

    @staticmethod
    def _verify(allow_self_signed):
        if os.getenv('PYTHONHTTPSVERIFY', '1') == '0':
            logger.debug('PYTHONHTTPSVERIFY=0 detected so we will '
                         'disable requests library SSL verification.')
            allow_self_signed = True
        if allow_self_signed:
            requests.packages.urllib3.disable_warnings(InsecureRequestWarning)
        return not allow_self_signed

    @property
    def server(self):
        return self.auth.server

    @property
    def username(self):
        return self.auth.user

    def reconfigure(self, url=None, username=None, allow_self_signed=None):
        '''Apply changed settings.

        Credentials and session state are dropped when the URL or the
        user name changes.

        :param url: URL of Buildbot server, ``str``
        :param username: Server username, ``str``
        :param allow_self_signed: skip TLS certificate verification,
            ``bool``
        '''
        server = self.server if url is None else self._normalize_url(url)
        if username is None:
            username = self.username
        verify = self.auth.verify
        if allow_self_signed is not None:
            verify = self._verify(allow_self_signed)
        with self.auth.lock:
            if server != self.server or username != self.username:
                logger.debug('Server settings changed, dropping credentials')
                self.auth.reset(server, username, verify=verify)
            elif verify != self.auth.verify:
                self.auth.verify = verify
                self.auth.auth_state.verify = verify

    def _get_encoded_params(self, params):
        for k, v in params.items():
            if k in ['name']:
                params[k] = quote(v.encode('utf8'), safe='')
        return params

    def _endpoint(self, format_spec, variables=None):
        if variables:
            return format_spec % self._get_encoded_params(variables)
        return format_spec

    def _build_url(self, format_spec, variables=None):
        url_path = self._endpoint(format_spec, variables)
        return str(urljoin(self.server + endpoints.API_PREFIX, url_path))

    def _send(self, method, url, headers, allow_redirects=True, data=None,
              params=None):
        '''Send one HTTP request, without answering authentication.'''
        req = requests.Request(method, url, headers=headers, params=params)
        if data is not None:
            req.headers['Content-Type'] = 'application/json'
            req.data = json.dumps(data)
        r = self._session.prepare_request(req)
        verify = self.auth.auth_state.verify
        # requests.Session.send() does not honor env settings by design
        # see https://github.com/requests/requests/issues/2807
        _settings = self._session.merge_environment_settings(
            r.url, {}, None, verify, None)
        if verify is False:
            _settings['verify'] = False
        _settings['timeout'] = self.timeout
        _settings['allow_redirects'] = allow_redirects
        try:
            return self._session.send(r, **_settings)
        except req_exc.Timeout as e:
            raise TimeoutException('Error in request: %s' % (e))
        except req_exc.RequestException as e:
            raise TransportError('Error in request: %s' % (e))

    def buildbot_request(self, endpoint, data=None, params=None):
        '''Send a request to the API, authenticating as often as needed.

        The same request is sent again after every successful
        authentication. The loop ends with the first response that is not
        a 401 or 403, or when no more credentials can be obtained.

        :param endpoint: path below ``api/v2/``, ``str``
        :param data: JSON body; the request is a POST when given
        :param params: query parameters, ``dict``
        :returns: the last ``requests.Response``
        '''
        url = self._build_url(endpoint)
        method = 'GET' if data is None else 'POST'
        with self.auth.lock:
            while True:
                response = self._send(
                    method, url, dict(self.auth.auth_state.headers),
                    data=data, params=params)
                if response.status_code not in AUTH_STATUS_CODES:
                    # the credentials passed, whatever the answer
                    self.auth.mark_authenticated()
                    return response
                if not self.auth.can_authenticate():
                    return response
                try:
                    self.auth.authenticate(response, method)
                except CredentialDenied as e:
                    logger.debug('Not retrying %s %s: %s', method, url, e)
                    return response
                # only the new auth state may carry a session cookie
                self._session.cookies.clear()

    def buildbot_open(self, endpoint, data=None, params=None):
        '''Return the decoded JSON answer of an API request.

        :returns: decoded JSON, or ``None`` when the user declined to
                  authenticate
        :raises: :class:`ServerError` for error statuses,
                 :class:`ProtocolError` when a 2xx body is not JSON,
                 :class:`TransportError` on network failures
        '''
        response = self.buildbot_request(endpoint, data, params)
        if response.ok:
            try:
                return response.json()
            except ValueError:
                raise ProtocolError(
                    'Could not parse JSON answer of %s' % endpoint)
        if (response.status_code in AUTH_STATUS_CODES and
                self.auth.can_authenticate()):
            # declined by the user, not an error
            return None
        raise self._error(response)

    def _error(self, response):
        message = None
        try:
            message = response.json()['error']['message']
        except (ValueError, KeyError, TypeError):
            pass
        if isinstance(message, dict):
            message = '; '.join('%s: %s' % (k, v)
                                for k, v in message.items())
        if not message:
            message = response.reason or 'HTTP error %d' % response.status_code
        if response.status_code == 404:
            return NotFoundException(message, response.status_code)
        return ServerError(message, response.status_code)

    def _rpc(self, endpoint, method, params=None):
        '''Call a JSON-RPC 2.0 method on an endpoint.

        :returns: the ``result`` member, or ``None`` when declined
        '''
        answer = self.buildbot_open(endpoint, data={
            'jsonrpc': '2.0',
            'id': next(self._rpc_ids),
            'method': method,
            'params': params or {},
        })
        if answer is None:
            return None
        if not isinstance(answer, dict):
            raise ProtocolError('Unexpected answer to %s call' % method)
        error = answer.get('error')
        if error:
            message = error
            if isinstance(error, dict):
                message = error.get('message')
            raise ServerError(message or 'JSON-RPC %s failed' % method)
        return answer.get('result')

    def get_builders(self, with_last_build=False):
        '''Get the builders that run on at least one master.

        :param with_last_build: add the most recent completed build of
            every builder as ``last_build``, ``bool``
        :returns: list of builders, ``[dict]``

        Example::

            >>> builders = server.get_builders()
            >>> print(builders[0])
            {'builderid': 2, 'name': 'runtests', 'masterids': [1],
             'tags': [], 'description': None}
        '''
        data = self.buildbot_open(endpoints.BUILDERS)
        if data is None:
            return None
        builders = normalize.filter_builders(data)
        if with_last_build:
            for builder in builders:
                normalize.attach_last_build(
                    builder, self.get_last_build(builder['builderid']))
        return builders

    def get_builder(self, builderid):
        '''Get one builder.

        :param builderid: builder id, ``int``
        :returns: builder, ``dict``
        '''
        data = self.buildbot_open(
            self._endpoint(endpoints.BUILDER_INFO, locals()))
        if data is None:
            return None
        builders = normalize.filter_builders(data)
        if not builders:
            raise NotFoundException(
                'builder[%d] does not exist or has no master' % builderid)
        return builders[0]

    def get_last_build(self, builderid):
        '''Get the most recent completed build of a builder.

        :param builderid: builder id, ``int``
        :returns: build, ``dict`` or ``None``
        '''
        data = self.buildbot_open(
            self._endpoint(endpoints.BUILDER_BUILDS, locals()),
            params={'order': '-number', 'complete': 'true', 'limit': 1})
        if data is None:
            return None
        builds = normalize.normalize_builds(data)
        if builds:
            return builds[0]
        return None

    def get_builds(self, builderid=None, complete=None, limit=None):
        '''Get builds, most recent first.

        :param builderid: only the builds of this builder, ``int``
        :param complete: only complete (``True``) or running (``False``)
            builds, ``bool``
        :param limit: maximum number of builds, ``int``
        :returns: list of builds, ``[dict]``
        '''
        params = {'order': '-number'}
        if complete is not None:
            params['complete'] = 'true' if complete else 'false'
        if limit is not None:
            params['limit'] = limit
        if builderid is None:
            endpoint = endpoints.BUILDS
        else:
            endpoint = self._endpoint(endpoints.BUILDER_BUILDS, locals())
        data = self.buildbot_open(endpoint, params=params)
        if data is None:
            return None
        return normalize.normalize_builds(data)

    def get_running_builds(self, builderid=None):
        '''Get builds that are not complete yet.

        :param builderid: only the builds of this builder, ``int``
        :returns: list of builds, ``[dict]``
        '''
        return self.get_builds(builderid=builderid, complete=False)

    def get_build(self, buildid):
        '''Get build information dictionary.

        :param buildid: build id, ``int``
        :returns: build, ``dict``
        '''
        data = self.buildbot_open(
            self._endpoint(endpoints.BUILD_INFO, locals()))
        if data is None:
            return None
        builds = normalize.normalize_builds(data)
        if not builds:
            raise NotFoundException('build[%d] does not exist' % buildid)
        return builds[0]

    def stop_build(self, buildid, reason=None):
        '''Stop a running build.

        :param buildid: build id, ``int``
        :param reason: reason shown in the build, ``str``
        '''
        params = {}
        if reason:
            params['reason'] = reason
        return self._rpc(self._endpoint(endpoints.BUILD_INFO, locals()),
                         'stop', params)

    def get_force_schedulers(self, builder=None):
        '''Get force schedulers.

        :param builder: only the schedulers that can force this builder,
            builder ``dict`` or builder name ``str``
        :returns: list of force schedulers, ``[dict]``
        '''
        data = self.buildbot_open(endpoints.FORCE_SCHEDULERS)
        if data is None:
            return None
        schedulers = normalize.collection(data, 'forceschedulers')
        if builder is None:
            return schedulers
        if isinstance(builder, dict):
            builder = builder['name']
        return [s for s in schedulers
                if builder in s.get('builder_names', [])]

    def get_force_scheduler(self, name):
        '''Get one force scheduler, including its field tree.

        :param name: scheduler name, ``str``
        :returns: force scheduler, ``dict``
        '''
        data = self.buildbot_open(
            self._endpoint(endpoints.FORCE_SCHEDULER, locals()))
        if data is None:
            return None
        schedulers = normalize.collection(data, 'forceschedulers')
        if not schedulers:
            raise NotFoundException(
                'force scheduler[%s] does not exist' % name)
        return schedulers[0]

    def force_build(self, scheduler, builder, values=None):
        '''Start a build through a force scheduler.

        Fixed fields are sent with their defaults. Visible fields missing
        from ``values`` are asked through the prompt, keeping their
        default when no prompt is configured.

        :param scheduler: force scheduler ``dict`` or name ``str``
        :param builder: builder ``dict``
        :param values: field values by ``fullName``, ``dict``
        :returns: the ``force`` result (build set id and build request
            ids), or ``None`` when cancelled
        '''
        if not isinstance(scheduler, dict):
            scheduler = self.get_force_scheduler(scheduler)
            if scheduler is None:
                return None
        defaults, editable = normalize.resolve_force_fields(scheduler)

        values = dict(values or {})
        for field in editable:
            if field.name in values:
                continue
            if self.prompt is None:
                if field.default is not None:
                    values[field.name] = field.default
                continue
            answer = self.prompt.ask_text(field.label, field.default)
            if answer is None:
                logger.debug('Force build cancelled at field %s', field.name)
                return None
            values[field.name] = answer

        params = normalize.build_force_params(
            defaults, values, builder['builderid'], self.username)
        name = scheduler['name']
        endpoint = self._endpoint(endpoints.FORCE_SCHEDULER, locals())
        return self._rpc(endpoint, 'force', params)

    def pick_builder(self, placeholder=None):
        '''Let the user choose one of the builders.

        :returns: builder, ``dict`` or ``None``
        '''
        builders = self.get_builders()
        if not builders or self.prompt is None:
            return None
        picked = self.prompt.choose([b['name'] for b in builders],
                                    placeholder)
        for builder in builders:
            if builder['name'] == picked:
                return builder
        return None

    def pick_force_scheduler(self, builder, placeholder=None):
        '''Let the user choose a force scheduler of ``builder``.

        A single scheduler is returned without asking.

        :returns: force scheduler, ``dict`` or ``None``
        '''
        schedulers = self.get_force_schedulers(builder)
        if not schedulers:
            return None
        if len(schedulers) == 1 or self.prompt is None:
            return schedulers[0]
        picked = self.prompt.choose([s['name'] for s in schedulers],
                                    placeholder)
        for scheduler in schedulers:
            if scheduler['name'] == picked:
                return scheduler
        return None

    def builders_url(self):
        '''Get the web page listing all builders.'''
        return self.server + endpoints.WEB_BUILDERS

    def builder_url(self, builderid):
        '''Get the web page of a builder.'''
        return self.server + endpoints.WEB_BUILDER % {'builderid': builderid}

    def build_url(self, build):
        '''Get the web page of a build.'''
        return self.server + endpoints.WEB_BUILD % build

