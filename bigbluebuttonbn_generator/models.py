# This file is part of the CERN Indico plugins.
# Copyright (C) 2014 - 2026 CERN
#
# The CERN Indico plugins are free software; you can redistribute
# them and/or modify them under the terms of the MIT License; see
# the LICENSE file for more details.

import typing as t
from dataclasses import dataclass, field
from enum import Enum


class RecordingState(str, Enum):
    awaiting = 'awaiting'
    notified = 'notified'
    published = 'published'
    unpublished = 'unpublished'
    deleted = 'deleted'


class Course(t.NamedTuple):
    id: int
    fullname: str
    shortname: str


@dataclass
class RecordingFixture:
    """A recording, both stored locally and mocked on the remote server."""

    bigbluebuttonbnid: int | None = None
    meeting_id: str = ''
    course_id: int | None = None
    state: RecordingState = RecordingState.notified
    imported: bool = False
    headless: bool = False
    recording: str = ''
    recording_id: str = ''
    group_id: int | None = None
    meta: dict[str, str] = field(default_factory=dict)
    id: int | None = None

    def to_mockdata(self):
        """Returns the data sent to the mock server to create this recording."""
        data = {
            'headless': self.headless,
            'imported': self.imported,
            'recording': self.recording,
            'state': self.state,
        }
        if self.recording_id:
            data['recordingid'] = self.recording_id
        if self.group_id:
            data['groupid'] = self.group_id
        data.update({
            'bigbluebuttonbnid': self.bigbluebuttonbnid,
            'meetingID': self.meeting_id,
            'courseid': self.course_id,
            'meta': dict(self.meta),
        })
        return data
