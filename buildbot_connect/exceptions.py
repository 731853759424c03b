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
.. module:: buildbot_connect.exceptions
    :platform: Unix, Windows
    :synopsis: Exceptions raised by the Buildbot API client
'''


class BuildbotException(Exception):
    '''General exception type for buildbot-API-related failures.'''
    pass


class AuthException(BuildbotException):
    '''Authentication against the server could not be computed.'''
    pass


class MalformedChallenge(AuthException):
    '''The WWW-Authenticate header is missing or cannot be parsed.'''
    pass


class UnsupportedAuthMode(AuthException):
    '''The server requested a digest mode that is not implemented.'''
    pass


class CredentialDenied(AuthException):
    '''The user declined or cancelled a required credential prompt.'''
    pass


class ServerError(BuildbotException):
    '''The server answered with a non-2xx status.'''

    def __init__(self, message, status_code=None):
        super(ServerError, self).__init__(message)
        self.status_code = status_code


class NotFoundException(ServerError):
    '''A special exception to call out the case of receiving a 404.'''
    pass


class TransportError(BuildbotException):
    '''The request did not reach the server or got no answer.'''
    pass


class TimeoutException(TransportError):
    '''A special exception to call out in the case of a socket timeout.'''


class ProtocolError(BuildbotException):
    '''The server answered with an unexpected response shape.'''
    pass
