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
.. module:: buildbot_connect.digest_auth
    :platform: Unix, Windows
    :synopsis: Authorization header computation for Basic and Digest
               (RFC 2617) challenges
'''

import base64
import collections
import hashlib
import logging
import os
import re
import threading

from buildbot_connect.exceptions import MalformedChallenge
from buildbot_connect.exceptions import UnsupportedAuthMode

logger = logging.getLogger(__name__)

CNONCE_SIZE = 16  # bytes, rendered as 32 hex characters

Challenge = collections.namedtuple(
    'Challenge', ['scheme', 'realm', 'nonce', 'opaque', 'qop'])


class NonceCounter(object):
    '''Process-wide digest nonce count.

    RFC 2617 keeps one count per server nonce; a single shared count is
    used instead, which servers accept because every response also
    carries a fresh cnonce.
    '''

    def __init__(self, start=0):
        self._value = start
        self._lock = threading.Lock()

    @property
    def value(self):
        return self._value

    def next(self):
        '''Increment the count and return it as an ``nc`` value.

        :returns: 8 zero-padded hex digits, ``str``
        '''
        with self._lock:
            self._value += 1
            return '%08x' % self._value


NONCE_COUNTER = NonceCounter()


def _parse_attribute(raw, field, trim=True):
    # unquoted values end at the first comma
    match = re.search(r'\b%s=("[^"]*"|[^,]*)' % re.escape(field), raw,
                      re.IGNORECASE)
    if match is None:
        return None
    if trim:
        return re.sub(r'[\s"]', '', match.group(1))
    return match.group(1)


def _parse_qop(raw):
    qop = _parse_attribute(raw, 'qop')
    if qop is not None:
        qops = qop.split(',')
        if 'auth' in qops:
            return 'auth'
        elif 'auth-int' in qops:
            return 'auth-int'
    # pre RFC 2617 servers send no qop at all
    return None


def parse_challenge(header):
    '''Parse a ``WWW-Authenticate`` header value.

    :param header: raw header value, ``str``
    :returns: :class:`Challenge`
    :raises: :class:`MalformedChallenge` if the header is missing or
             too short to hold a challenge
    '''
    if not header or len(header) < 5:
        raise MalformedChallenge('Cannot authenticate: bad HTTP header')

    parts = header.split()
    if not parts:
        raise MalformedChallenge('Cannot authenticate: bad HTTP header')
    scheme = parts[0]
    if scheme == 'Basic':
        return Challenge(scheme, None, None, None, None)

    realm = (_parse_attribute(header, 'realm', trim=False) or '')
    return Challenge(scheme=scheme,
                     realm=realm.replace('"', ''),
                     nonce=_parse_attribute(header, 'nonce') or '',
                     opaque=_parse_attribute(header, 'opaque'),
                     qop=_parse_qop(header))


def digest_uri(url):
    '''Return the path and query of ``url``, as sent in the digest ``uri``.

    >>> digest_uri('http://example.com:8010/api/v2/builders?limit=1')
    '/api/v2/builders?limit=1'
    '''
    if not url:
        return '/'
    stripped = url.replace('//', '', 1)
    index = stripped.find('/')
    if index == -1:
        return '/'
    return stripped[index:]


def make_cnonce():
    return base64.b16encode(os.urandom(CNONCE_SIZE)).decode('ascii').lower()


def _md5(text):
    return hashlib.md5(text.encode('utf-8')).hexdigest()


def digest_response(challenge, user, password, method, uri, nc, cnonce):
    '''Compute the ``response`` member of a digest Authorization header.'''
    ha1 = _md5('%s:%s:%s' % (user, challenge.realm, password))
    ha2 = _md5('%s:%s' % (method, uri))
    if challenge.qop:
        return _md5('%s:%s:%s:%s:%s:%s' % (
            ha1, challenge.nonce, nc, cnonce, challenge.qop, ha2))
    return _md5('%s:%s:%s' % (ha1, challenge.nonce, ha2))


def compute_auth(header, user, password, method='GET', url=None,
                 counter=None, cnonce=None):
    '''Compute the ``Authorization`` header answering a challenge.

    :param header: ``WWW-Authenticate`` header of the 401 response, ``str``
    :param user: user name, ``str``
    :param password: password, ``str``
    :param method: HTTP method of the request being authorized, ``str``
    :param url: resolved URL of the challenged response, ``str``
    :param counter: nonce counter, defaults to the process-wide one,
                    :class:`NonceCounter`
    :param cnonce: client nonce, random when not given, ``str``
    :returns: Authorization header value, ``str``
    :raises: :class:`MalformedChallenge`, :class:`UnsupportedAuthMode`

    Example::

        >>> compute_auth('Basic realm="buildbot"', 'alice', 'secret')
        'Basic YWxpY2U6c2VjcmV0'
    '''
    challenge = parse_challenge(header)

    if challenge.scheme == 'Basic':
        token = base64.b64encode(
            ('%s:%s' % (user, password)).encode('utf-8'))
        return 'Basic ' + token.decode('ascii')

    if challenge.qop == 'auth-int':
        raise UnsupportedAuthMode(
            'Cannot authenticate: auth-int is not implemented')

    if counter is None:
        counter = NONCE_COUNTER
    if cnonce is None:
        cnonce = make_cnonce()
    nc = counter.next()
    uri = digest_uri(url)

    response = digest_response(challenge, user, password, method, uri,
                               nc, cnonce)
    logger.debug('Computed digest for user %s on %s (nc=%s)', user, uri, nc)

    opaque = ''
    if challenge.opaque is not None:
        opaque = 'opaque="%s",' % challenge.opaque
    qop = ''
    if challenge.qop:
        qop = 'qop="%s",' % challenge.qop
    return ('%s username="%s",realm="%s",nonce="%s",uri="%s",%s%s'
            'algorithm="MD5",response="%s",nc=%s,cnonce="%s"' % (
                challenge.scheme, user, challenge.realm, challenge.nonce,
                uri, opaque, qop, response, nc, cnonce))
