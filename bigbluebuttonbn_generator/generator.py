# This file is part of the CERN Indico plugins.
# Copyright (C) 2014 - 2026 CERN
#
# The CERN Indico plugins are free software; you can redistribute
# them and/or modify them under the terms of the MIT License; see
# the LICENSE file for more details.

import hashlib
import json
import random
import time
from dataclasses import replace
from urllib.parse import urlencode

from bigbluebuttonbn_generator import logger
from bigbluebuttonbn_generator.api import MockServer
from bigbluebuttonbn_generator.models import RecordingFixture, RecordingState
from bigbluebuttonbn_generator.participants import ParticipantResolver, dump_participants
from bigbluebuttonbn_generator.settings import GeneratorSettings
from bigbluebuttonbn_generator.util import ConfigurationError, NotFoundError, parse_bool


__all__ = ('BigBlueButtonGenerator',)


LOG_EVENT_CREATE = 'Create'
BROKER_PATH = '/mod/bigbluebuttonbn/bbb_broker.php'


def _require(data, key):
    try:
        return data[key]
    except KeyError:
        raise ConfigurationError(f'Missing required field: {key}')


def _get(data, key, default):
    value = data.get(key)
    return default if value is None else value


def _random_meeting_id():
    return hashlib.sha1(str(random.random()).encode()).hexdigest()


class BigBlueButtonGenerator:
    """BigBlueButton fixtures

    Creates activity instances, recordings, meetings and log entries for
    tests. Recordings and meetings are also created on the mock BigBlueButton
    server the activity talks to during tests.

    :param instances: `InstanceRepository` -- where activity instances live
    :param recordings: `RecordingStore` -- where recordings are persisted
    :param directory: `Directory` -- role and user lookups
    :param activity_log: `ActivityLog` -- receives the log entries
    :param mock_server: `MockServer` -- defaults to one built from the
        current ``mock_server_url`` and ``timeout`` settings on every call
    :param settings: overrides of `default_settings`
    """

    logger = logger
    default_settings = {
        'mock_server_url': '',
        'timeout': 30,
        'site_url': 'https://www.example.com/moodle',
        'origin': 'Moodle',
        'origin_version': '4.0',
    }

    def __init__(self, instances, recordings, directory, activity_log, mock_server=None, **settings):
        self.instances = instances
        self.recordings = recordings
        self.activity_log = activity_log
        self.participants = ParticipantResolver(directory)
        self.settings = GeneratorSettings(self.default_settings, **settings)
        self._mock_server = mock_server

    @property
    def mock_server(self):
        if self._mock_server is not None:
            return self._mock_server
        # settings may change between calls
        return MockServer(self.settings.get('mock_server_url'), self.settings.get('timeout'))

    def create_instance(self, record=None, options=None):
        """Creates an activity instance.

        Fields missing from `record` get test defaults. The ``moderators`` and
        ``viewers`` selections are turned into the ``participants`` field.

        :param record: dict -- the fields of the instance
        :param options: dict -- course module options, passed on as-is
        :returns: dict -- the stored instance record
        """
        now = int(time.time())
        defaults = {
            'type': 0,
            'meetingid': _random_meeting_id(),
            'record': True,
            'moderatorpass': 'mp',
            'viewerpass': 'ap',
            'participants': '[]',
            'timecreated': now,
            'timemodified': now,
            'presentation': None,
        }

        record = dict(record or {})
        record['participants'] = dump_participants(self.participants.resolve_participants(record))
        for key, value in defaults.items():
            if record.get(key) is None:
                record[key] = value

        instance = self.instances.create(record, dict(options or {}))
        self.logger.info('Created activity %s (meeting %s)', instance['id'], instance['meetingid'])
        return instance

    def create_recording(self, data):
        """Creates a recording for the given activity.

        The recording is created both locally and on the mock server. An
        imported recording is a copy of an existing recording (``importedid``)
        whose payload is fetched from the mock server.

        :param data: dict -- ``bigbluebuttonbnid`` and optionally ``imported``,
            ``importedid``, ``groupid``, ``state``, ``presentername``,
            ``description``, ``name`` and ``tags``
        :returns: RecordingFixture -- the persisted recording
        """
        instance = self.instances.get_from_instance_id(_require(data, 'bigbluebuttonbnid'))

        if parse_bool(data.get('imported')):
            if not (imported_id := data.get('importedid')):
                raise ConfigurationError('Imported recordings require the id of the source recording (importedid)')
            source = self.recordings.read_by({'recording_id': imported_id})
            if source is None:
                raise NotFoundError(f'Recording {imported_id} not found')
            recording = replace(source, id=None, imported=True, meta=dict(source.meta))
        else:
            recording = RecordingFixture(state=self._get_recording_state(data.get('state')))

        if group_id := data.get('groupid'):
            instance.set_group_id(group_id)
            recording.group_id = group_id

        recording.bigbluebuttonbnid = instance.get_instance_id()
        recording.meeting_id = instance.get_meeting_id()
        recording.course_id = instance.get_course_id()

        if recording.imported:
            payload = self.mock_server.fetch_recording(recording.meeting_id, recording.meeting_id)
            recording.recording = json.dumps(payload)

        recording.meta.update({
            'isBreakout': 'false',
            'bn-presenter-name': _get(data, 'presentername', 'Fake presenter'),
            'bn-recording-ready-url': self.get_broker_url(action='recording_ready',
                                                          bigbluebuttonbn=instance.get_instance_id()),
            'bbb-recording-description': _get(data, 'description', ''),
            'bbb-recording-name': _get(data, 'name', ''),
            'bbb-recording-tags': _get(data, 'tags', ''),
        })

        recording.recording_id = self.mock_server.create_recording(recording.to_mockdata())
        self.recordings.create(recording)
        self.logger.info('Created recording %s for meeting %s (imported: %s)',
                         recording.recording_id, recording.meeting_id, recording.imported)
        return recording

    def create_meeting(self, data):
        """Mocks an in-progress meeting on the remote server.

        Nothing is stored locally.

        :param data: dict -- ``instanceid``, optionally ``groupid`` and any
            extra meeting parameter
        :returns: dict -- the room configuration sent to the server
        """
        instance = self.instances.get_from_instance_id(_require(data, 'instanceid'))
        if 'groupid' in data:
            instance = self.instances.get_group_instance_from_instance(instance, data['groupid'])

        course = instance.get_course()
        room_config = dict(data)
        room_config.update({
            'meetingID': instance.get_meeting_id(),
            'meetingName': instance.get_meeting_name(),
            'attendeePW': instance.get_viewer_password(),
            'moderatorPW': instance.get_moderator_password(),
            'voiceBridge': instance.get_voice_bridge(),
            'meta': {
                'bbb-context': course.fullname,
                'bbb-context-id': course.id,
                'bbb-context-label': course.shortname,
                'bbb-context-name': course.fullname,
                'bbb-origin': self.settings.get('origin'),
                'bbb-origin-tag': f'moodle-mod_bigbluebuttonbn ({self.settings.get("origin_version")})',
                'bbb-recording-description': instance.get_meeting_description(),
                'bbb-recording-name': instance.get_meeting_name(),
            },
        })

        self.mock_server.create_meeting(room_config)
        self.logger.info('Created meeting %s', room_config['meetingID'])
        return room_config

    def create_log(self, record=None):
        """Creates a log entry for an activity.

        :param record: dict -- ``bigbluebuttonbnid`` and the log fields
        :returns: dict -- the logged record
        """
        record = dict(record or {})
        instance = self.instances.get_from_instance_id(_require(record, 'bigbluebuttonbnid'))
        activity = instance.get_instance_data()
        record = {'meetingid': f'{activity["meetingid"]}-{activity["course"]}-{activity["id"]}', **record}
        self.activity_log.log(activity, LOG_EVENT_CREATE, record)
        return record

    def send_mock_request(self, endpoint, params=None, mockdata=None):
        return self.mock_server.request(endpoint, params, mockdata)

    def reset_mock(self):
        """Removes all meetings and recordings from the mock server."""
        self.mock_server.reset()

    def get_broker_url(self, **params):
        return f'{self.settings.get("site_url")}{BROKER_PATH}?{urlencode(params)}'

    def _get_recording_state(self, state):
        if state is None:
            return RecordingState.notified
        try:
            return RecordingState(state)
        except ValueError:
            raise ConfigurationError(f'Unknown recording state: {state}')
