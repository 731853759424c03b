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
.. module:: buildbot_connect.session
    :platform: Unix, Windows
    :synopsis: Credential and session handling for a Buildbot server

A :class:`SessionAuthController` answers 401 and 403 responses. It is a
small state machine::

    ANONYMOUS      --401/403-->  CHALLENGED
    CHALLENGED     --2xx-->      AUTHENTICATED
    AUTHENTICATED  --401/403-->  CHALLENGED
    CHALLENGED     --401/403-->  CHALLENGED (password asked again)
    any            --declined-->  DENIED, until :meth:`reset`

A 401 is answered with an ``Authorization`` header computed from the
response challenge. A 403 means the server wants a login session: the
``auth/login`` page is challenged, answered, and the session cookie it
sets is kept instead.
'''

import logging
import threading

from requests.models import REDIRECT_STATI

from buildbot_connect import digest_auth
from buildbot_connect import endpoints
from buildbot_connect.exceptions import CredentialDenied
from buildbot_connect.interfaces import CREDENTIAL_NAMESPACE

logger = logging.getLogger(__name__)

ANONYMOUS = 'anonymous'
CHALLENGED = 'challenged'
AUTHENTICATED = 'authenticated'
DENIED = 'denied'
TERMINAL_STATES = frozenset([DENIED])

SESSION_COOKIE_PREFIX = 'TWISTED_SESSION='


class _Denied(object):
    '''Password marker for a user who declined to give one.'''

    def __repr__(self):
        return 'PASSWORD_DENIED'


PASSWORD_DENIED = _Denied()


class Credentials(object):
    '''User and password for one server account.

    ``password`` is ``None`` until it has been looked up, and
    :data:`PASSWORD_DENIED` once the user refused to supply it.
    '''

    def __init__(self, account, user, password=None):
        self.account = account
        self.user = user
        self.password = password

    @property
    def denied(self):
        return self.password is PASSWORD_DENIED


class AuthState(object):
    '''Headers sent with every request, rebuilt on each authentication.'''

    def __init__(self, headers=None, verify=True):
        self.headers = dict(headers or {})
        self.verify = verify

    def __repr__(self):
        # values hold credentials
        return '<AuthState headers=%s verify=%s>' % (
            sorted(self.headers), self.verify)


def set_cookie_headers(response):
    '''Return every ``Set-Cookie`` value of ``response``, in order.

    ``response.headers`` folds repeated headers into a single value, so
    the raw urllib3 headers are read when available.
    '''
    raw = getattr(response, 'raw', None)
    raw_headers = getattr(raw, 'headers', None)
    if raw_headers is not None and hasattr(raw_headers, 'getlist'):
        return list(raw_headers.getlist('Set-Cookie'))
    value = response.headers.get('set-cookie')
    if value:
        return [value]
    return []


def session_cookie(response):
    '''Return ``name=value`` of the last session cookie set by ``response``.

    :returns: cookie, ``str`` or ``None``
    '''
    cookies = [c for c in set_cookie_headers(response)
               if c.startswith(SESSION_COOKIE_PREFIX)]
    if not cookies:
        return None
    return cookies[-1].split('; ')[0]


class SessionAuthController(object):

    def __init__(self, server, send, username=None, password=None,
                 credential_store=None, prompt=None, verify=True,
                 namespace=CREDENTIAL_NAMESPACE, on_username=None,
                 counter=None):
        '''Create a controller for one server.

        :param server: server root URL ending with ``/``, ``str``
        :param send: callable ``send(method, url, headers,
                     allow_redirects=True)`` returning a
                     ``requests.Response``, used for the login flow
        :param username: configured user name, ``str`` or ``None``
        :param password: known password, ``str`` or ``None``
        :param credential_store: :class:`CredentialStore` or ``None``
        :param prompt: :class:`Prompt` or ``None``
        :param verify: verify TLS certificates, ``bool``
        :param namespace: credential store namespace, ``str``
        :param on_username: called with a user name entered at a prompt
        :param counter: digest nonce counter,
                        :class:`~buildbot_connect.digest_auth.NonceCounter`
        '''
        self.send = send
        self.credential_store = credential_store
        self.prompt = prompt
        self.namespace = namespace
        self.on_username = on_username
        self.counter = counter
        self.lock = threading.RLock()
        self.reset(server, username, password, verify)

    def reset(self, server, username=None, password=None, verify=True):
        '''Forget everything learnt about the previous server or user.'''
        with self.lock:
            self.server = server
            self.verify = verify
            self.credentials = Credentials(
                self._account(username), username, password)
            self.auth_state = AuthState(verify=verify)
            self.state = ANONYMOUS

    def _account(self, username):
        return (self.namespace, self.server, username)

    @property
    def user(self):
        return self.credentials.user

    @property
    def finished(self):
        return self.state in TERMINAL_STATES

    def can_authenticate(self):
        '''Whether a 401/403 can be answered at all.'''
        return bool(self.user) or self.prompt is not None

    def _ensure_user(self):
        if self.user:
            return self.user
        if self.prompt is None:
            raise CredentialDenied('No user name configured')
        user = self.prompt.ask_text(
            "Enter user name for '%s'" % self.server)
        if not user:
            raise CredentialDenied('User name prompt cancelled')
        self.credentials = Credentials(self._account(user), user)
        if self.on_username is not None:
            self.on_username(user)
        return user

    def _deny(self, reason):
        self.credentials.password = PASSWORD_DENIED
        self.state = DENIED
        logger.debug('Authentication for %s denied: %s',
                     self.user, reason)
        raise CredentialDenied(reason)

    def _resolve_password(self):
        credentials = self.credentials
        if credentials.denied:
            raise CredentialDenied(
                "No password for user '%s'" % credentials.user)

        if credentials.password is None:
            if self.credential_store is not None:
                stored = self.credential_store.get(credentials.account)
                if stored:
                    credentials.password = stored
                    return stored
        elif self.state != CHALLENGED:
            return credentials.password

        # nothing stored, or the last password was rejected
        if self.prompt is None:
            self._deny('no password available')
        password = self.prompt.ask_secret(
            "Enter password for user '%s' on '%s'" % (
                credentials.user, self.server))
        if not password:
            self._deny('password prompt declined')
        credentials.password = password
        if self.credential_store is not None:
            self.credential_store.set(credentials.account, password)
        return password

    def authenticate(self, response, method='GET'):
        '''Build a new :class:`AuthState` answering a 401 or 403 response.

        :param response: the rejected ``requests.Response``
        :param method: method of the rejected request, ``str``
        :returns: the new :class:`AuthState`
        :raises: :class:`CredentialDenied` when no credential can be
                 obtained, :class:`MalformedChallenge`,
                 :class:`UnsupportedAuthMode`
        '''
        with self.lock:
            user = self._ensure_user()
            password = self._resolve_password()

            auth_state = AuthState(verify=self.verify)
            if response.status_code == 401:
                logger.debug('Answering %s challenge for %s',
                             method, response.url)
                auth_state.headers['Authorization'] = digest_auth.compute_auth(
                    response.headers.get('www-authenticate'), user, password,
                    method=method, url=response.url, counter=self.counter)
            else:
                cookie = self._login(user, password)
                if cookie is not None:
                    auth_state.headers['Cookie'] = cookie

            self.auth_state = auth_state
            self.state = CHALLENGED
            return auth_state

    def _login(self, user, password):
        url = self.server + endpoints.LOGIN
        logger.debug('Logging in as %s on %s', user, url)
        probe = self.send('GET', url, {})
        authorization = digest_auth.compute_auth(
            probe.headers.get('www-authenticate'), user, password,
            url=probe.url, counter=self.counter)
        response = self.send('GET', url, {'Authorization': authorization},
                             allow_redirects=False)
        if response.ok or response.status_code in REDIRECT_STATI:
            return session_cookie(response)
        logger.debug('Login as %s failed [%s]', user, response.status_code)
        return None

    def mark_authenticated(self):
        with self.lock:
            if self.state == CHALLENGED:
                self.state = AUTHENTICATED
