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
.. module:: buildbot_connect.interfaces
    :platform: Unix, Windows
    :synopsis: Collaborators supplied by the embedding application: a
               secret store and a user prompt
'''

import getpass
import threading

CREDENTIAL_NAMESPACE = 'Buildbot Connect'


class CredentialStore(object):
    '''Stores secrets keyed by ``(namespace, url, user)`` accounts.'''

    def get(self, account):
        '''Return the secret stored for ``account`` or ``None``.'''
        raise NotImplementedError

    def set(self, account, secret):
        raise NotImplementedError


class MemoryCredentialStore(CredentialStore):
    '''Keeps secrets for the lifetime of the process.'''

    def __init__(self, secrets=None):
        self._secrets = dict(secrets or {})
        self._lock = threading.Lock()

    def get(self, account):
        with self._lock:
            return self._secrets.get(account)

    def set(self, account, secret):
        with self._lock:
            self._secrets[account] = secret


class Prompt(object):
    '''Asks the user for values.

    Every method returns ``None`` when the user cancels, which is not the
    same as answering with an empty string.
    '''

    def ask_secret(self, message):
        raise NotImplementedError

    def ask_text(self, message, default=None):
        raise NotImplementedError

    def choose(self, options, placeholder=None):
        raise NotImplementedError


class ConsolePrompt(Prompt):
    '''Prompt on the controlling terminal; end of input cancels.'''

    def ask_secret(self, message):
        try:
            return getpass.getpass('%s: ' % message)
        except EOFError:
            return None

    def ask_text(self, message, default=None):
        if default:
            message = '%s [%s]' % (message, default)
        try:
            answer = input('%s: ' % message)
        except EOFError:
            return None
        if not answer and default is not None:
            return default
        return answer

    def choose(self, options, placeholder=None):
        options = list(options)
        if not options:
            return None
        for index, option in enumerate(options, 1):
            print('%d) %s' % (index, option))
        answer = self.ask_text(placeholder or 'Choice')
        if not answer:
            return None
        if answer in options:
            return answer
        try:
            index = int(answer)
        except ValueError:
            return None
        if 1 <= index <= len(options):
            return options[index - 1]
        return None
