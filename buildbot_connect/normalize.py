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
.. module:: buildbot_connect.normalize
    :platform: Unix, Windows
    :synopsis: Turn raw Buildbot JSON into builder, build and force
               scheduler records
'''

import collections
import datetime

from buildbot_connect.exceptions import ProtocolError

# supplied by the client itself, never by the operator
RESERVED_FIELDS = frozenset(['username', 'owner'])
MAX_FIELD_DEPTH = 32

BUILD_RESULTS_DESCRIPTIONS = [
    'completed successfully',
    'completed with warnings',
    'failed',
    'was skipped',
    'stopped with exception',
    'has been retried',
    'was cancelled',
]

ForceParameter = collections.namedtuple(
    'ForceParameter', ['name', 'label', 'default', 'required'])


def collection(data, key):
    '''Return the list stored under ``key`` of an API answer.'''
    try:
        items = data[key]
    except (KeyError, TypeError):
        raise ProtocolError("Response has no '%s' collection" % key)
    if not isinstance(items, list):
        raise ProtocolError("Response member '%s' is not a list" % key)
    return items


def filter_builders(data):
    '''Return the builders of a ``builders`` response that run on a master.

    Builders without a master cannot be scheduled.
    '''
    return [b for b in collection(data, 'builders') if b.get('masterids')]


def to_datetime(timestamp):
    if timestamp is None:
        return None
    return datetime.datetime.fromtimestamp(timestamp, tz=datetime.timezone.utc)


def normalize_build(build):
    '''Convert the timestamps of a build record, in place.

    ``started_at`` and ``complete_at`` become aware UTC datetimes and a
    ``complete`` flag is derived from ``complete_at``, and a readable
    ``results_text`` from ``results``.
    '''
    if isinstance(build.get('started_at'), (int, float)):
        build['started_at'] = to_datetime(build['started_at'])
    if isinstance(build.get('complete_at'), (int, float)):
        build['complete_at'] = to_datetime(build['complete_at'])
    build['complete'] = build.get('complete_at') is not None
    build['results_text'] = describe_results(build.get('results'))
    return build


def normalize_builds(data):
    return [normalize_build(b) for b in collection(data, 'builds')]


def attach_last_build(builder, build):
    '''Record ``build`` as the most recent completed build of ``builder``.

    The ``last_build`` member is derived, it is not part of the server
    data model.
    '''
    builder['last_build'] = build
    return builder


def describe_results(results):
    if results is None:
        return 'is running'
    try:
        return BUILD_RESULTS_DESCRIPTIONS[results]
    except (IndexError, TypeError):
        return 'finished with result %s' % results


def iter_force_fields(fields):
    '''Yield the addressable fields of a force scheduler field tree.

    A field is addressable when it has a ``fullName``. Fields are yielded
    depth first in document order, so a group's fields come before the
    next sibling. Reserved fields are skipped.

    :param fields: top level fields, ``list``
    :raises: :class:`ProtocolError` when the tree nests deeper than
             ``MAX_FIELD_DEPTH``
    '''
    stack = [(0, list(reversed(fields or [])))]
    while stack:
        depth, pending = stack[-1]
        if not pending:
            stack.pop()
            continue
        field = pending.pop()
        if field.get('fullName') and \
                field['fullName'] not in RESERVED_FIELDS:
            yield field
        children = field.get('fields')
        if children:
            if depth + 1 > MAX_FIELD_DEPTH:
                raise ProtocolError('Force scheduler fields nest deeper '
                                    'than %d levels' % MAX_FIELD_DEPTH)
            stack.append((depth + 1, list(reversed(children))))


def resolve_force_fields(scheduler):
    '''Split the fields of a force scheduler.

    :param scheduler: force scheduler record (``all_fields`` or
                      ``fields``), or a list of fields
    :returns: ``(defaults, editable)``: the fixed values to send as is,
              ``dict``, and the fields to ask the user for, ``list`` of
              :class:`ForceParameter`

    Hidden fields that are not fixed are left out entirely.
    '''
    if isinstance(scheduler, dict):
        fields = scheduler.get('all_fields', scheduler.get('fields'))
    else:
        fields = scheduler

    defaults = {}
    editable = []
    for field in iter_force_fields(fields):
        if field.get('type') == 'fixed':
            if 'default' in field:
                defaults[field['fullName']] = field['default']
        elif not field.get('hide'):
            editable.append(ForceParameter(
                name=field['fullName'],
                label=field.get('label') or field['fullName'],
                default=field.get('default'),
                required=bool(field.get('required'))))
    return defaults, editable


def build_force_params(defaults, values, builderid, owner):
    '''Assemble the ``force`` call parameters.

    ``builderid`` and ``owner`` are set last and always win.
    '''
    params = dict(defaults)
    params.update(values or {})
    params['builderid'] = builderid
    params['owner'] = owner
    return params
