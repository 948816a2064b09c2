# This file is part of the CERN Indico plugins.
# Copyright (C) 2014 - 2026 CERN
#
# The CERN Indico plugins are free software; you can redistribute
# them and/or modify them under the terms of the MIT License; see
# the LICENSE file for more details.

"""Interfaces of the activity the generator builds fixtures for.

The generator never touches the activity's storage directly; it goes through
the protocols defined here. The in-memory implementations are public and can
back any harness without a real activity backend; the test suite uses them too.
"""

import typing as t
from itertools import count

from bigbluebuttonbn_generator.models import Course, RecordingFixture
from bigbluebuttonbn_generator.util import ConfigurationError, NotFoundError, UnknownUser


__all__ = ('Instance', 'InstanceRepository', 'RecordingStore', 'Directory', 'ActivityLog', 'MemoryInstance',
           'MemoryInstanceRepository', 'MemoryRecordingStore', 'MemoryDirectory', 'MemoryActivityLog')


# voice bridge numbers are offset on the server side
VOICE_BRIDGE_OFFSET = 70000


class Instance(t.Protocol):
    def get_instance_id(self) -> int: ...
    def get_instance_data(self) -> dict: ...
    def get_meeting_id(self) -> str: ...
    def get_meeting_name(self) -> str: ...
    def get_meeting_description(self) -> str: ...
    def get_viewer_password(self) -> str: ...
    def get_moderator_password(self) -> str: ...
    def get_voice_bridge(self) -> int | None: ...
    def get_course_id(self) -> int: ...
    def get_course(self) -> Course: ...
    def set_group_id(self, group_id: int) -> None: ...


class InstanceRepository(t.Protocol):
    def get_from_instance_id(self, instance_id: int) -> Instance: ...
    def get_group_instance_from_instance(self, instance: Instance, group_id: int) -> Instance: ...
    def create(self, record: dict, options: dict) -> dict: ...


class RecordingStore(t.Protocol):
    def read_by(self, filters: dict) -> RecordingFixture | None: ...
    def create(self, fixture: RecordingFixture) -> RecordingFixture: ...


class Directory(t.Protocol):
    def get_role_ids(self) -> dict[str, int]: ...
    def get_user_id(self, username: str) -> int: ...


class ActivityLog(t.Protocol):
    def log(self, activity: dict, event_type: str, record: dict) -> None: ...


class MemoryInstance:
    def __init__(self, data, course, group_id=None):
        self._data = data
        self._course = course
        self._group_id = group_id

    def __repr__(self):
        return f'<MemoryInstance({self._data["id"]}, group={self._group_id})>'

    def get_instance_id(self):
        return self._data['id']

    def get_instance_data(self):
        return dict(self._data)

    def get_meeting_id(self):
        meeting_id = f'{self._data["meetingid"]}-{self._course.id}-{self._data["id"]}'
        if self._group_id:
            meeting_id = f'{meeting_id}[{self._group_id}]'
        return meeting_id

    def get_meeting_name(self):
        return self._data.get('name', '')

    def get_meeting_description(self):
        return self._data.get('intro') or ''

    def get_viewer_password(self):
        return self._data['viewerpass']

    def get_moderator_password(self):
        return self._data['moderatorpass']

    def get_voice_bridge(self):
        voice_bridge = int(self._data.get('voicebridge') or 0)
        return VOICE_BRIDGE_OFFSET + voice_bridge if voice_bridge > 0 else None

    def get_course_id(self):
        return self._course.id

    def get_course(self):
        return self._course

    def get_group_id(self):
        return self._group_id

    def set_group_id(self, group_id):
        self._group_id = group_id


class MemoryInstanceRepository:
    def __init__(self, courses=()):
        self.courses = {course.id: course for course in courses}
        self.records = {}
        self._ids = count(1)

    def add_course(self, id, fullname, shortname):
        course = self.courses[id] = Course(id, fullname, shortname)
        return course

    def create(self, record, options=None):
        if record.get('course') not in self.courses:
            raise ConfigurationError('Module generator requires an existing course')
        record = dict(record, id=next(self._ids))
        record.setdefault('name', f'BigBlueButton {record["id"]}')
        record['cmid'] = (options or {}).get('cmid', record['id'])
        self.records[record['id']] = record
        return dict(record)

    def get_from_instance_id(self, instance_id):
        try:
            record = self.records[int(instance_id)]
        except (KeyError, TypeError, ValueError):
            raise NotFoundError(f'Activity {instance_id} not found')
        return MemoryInstance(record, self.courses[record['course']])

    def get_group_instance_from_instance(self, instance, group_id):
        return MemoryInstance(instance.get_instance_data(), instance.get_course(), group_id)


class MemoryRecordingStore:
    def __init__(self):
        self.recordings = []
        self._ids = count(1)

    def read_by(self, filters):
        for fixture in self.recordings:
            if all(getattr(fixture, name) == value for name, value in filters.items()):
                return fixture
        return None

    def create(self, fixture):
        fixture.id = next(self._ids)
        self.recordings.append(fixture)
        return fixture


class MemoryDirectory:
    def __init__(self, roles=None, users=None):
        self.roles = dict(roles or {})
        self.users = dict(users or {})

    def get_role_ids(self):
        return dict(self.roles)

    def get_user_id(self, username):
        try:
            return self.users[username]
        except KeyError:
            raise UnknownUser(username)


class MemoryActivityLog:
    def __init__(self):
        self.entries = []

    def log(self, activity, event_type, record):
        self.entries.append((activity, event_type, record))
