# This file is part of the CERN Indico plugins.
# Copyright (C) 2014 - 2026 CERN
#
# The CERN Indico plugins are free software; you can redistribute
# them and/or modify them under the terms of the MIT License; see
# the LICENSE file for more details.

from urllib.parse import parse_qsl, urlsplit

import pytest
import responses

from bigbluebuttonbn_generator.api import MockServer
from bigbluebuttonbn_generator.collaborators import (MemoryActivityLog, MemoryDirectory, MemoryInstanceRepository,
                                                     MemoryRecordingStore)
from bigbluebuttonbn_generator.generator import BigBlueButtonGenerator
from bigbluebuttonbn_generator.models import Course


MOCK_SERVER_URL = 'http://bbb-mock.test'

ROLES = {'manager': 1, 'editingteacher': 3, 'teacher': 4, 'student': 5}
USERS = {'alice': 21, 'bob': 22}


def xml_reply(returncode='SUCCESS', **elements):
    body = ''.join(f'<{tag}>{value}</{tag}>' for tag, value in elements.items())
    return f'<response><returncode>{returncode}</returncode>{body}</response>'


def add_reply(mocked_responses, endpoint, body=None, **kwargs):
    return mocked_responses.add(
        mocked_responses.GET,
        f'{MOCK_SERVER_URL}/{endpoint}',
        body=xml_reply() if body is None else body,
        content_type='text/xml',
        **kwargs
    )


def query_params(call):
    """Return the query string of a recorded call as an ordered list of pairs."""
    return parse_qsl(urlsplit(call.request.url).query, keep_blank_values=True)


@pytest.fixture
def mocked_responses():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def mock_server():
    return MockServer(MOCK_SERVER_URL)


@pytest.fixture
def directory():
    return MemoryDirectory(roles=ROLES, users=USERS)


@pytest.fixture
def instances():
    return MemoryInstanceRepository([Course(2, 'Test course 1', 'tc1')])


@pytest.fixture
def generator(instances, directory):
    return BigBlueButtonGenerator(instances, MemoryRecordingStore(), directory, MemoryActivityLog(),
                                  mock_server_url=MOCK_SERVER_URL)


@pytest.fixture
def activity(generator):
    return generator.create_instance({
        'course': 2,
        'name': 'Demo room',
        'intro': 'Weekly sync',
        'meetingid': 'm1',
        'voicebridge': 1234,
    })
