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
.. module:: buildbot_connect.endpoints
    :platform: Unix, Windows
    :synopsis: Buildbot REST endpoints
'''

API_PREFIX = 'api/v2/'

# REST Endpoints, relative to API_PREFIX
BUILDERS = 'builders'
BUILDER_INFO = 'builders/%(builderid)d'
BUILDER_BUILDS = 'builders/%(builderid)d/builds'
BUILDS = 'builds'
BUILD_INFO = 'builds/%(buildid)d'
FORCE_SCHEDULERS = 'forceschedulers'
FORCE_SCHEDULER = 'forceschedulers/%(name)s'

# Relative to the server root, outside of the API
LOGIN = 'auth/login'

# Web UI pages
WEB_BUILDERS = '#/builders'
WEB_BUILDER = '#/builders/%(builderid)d'
WEB_BUILD = '#/builders/%(builderid)d/builds/%(number)d'
