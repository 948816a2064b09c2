# This file is part of the CERN Indico plugins.
# Copyright (C) 2014 - 2026 CERN
#
# The CERN Indico plugins are free software; you can redistribute
# them and/or modify them under the terms of the MIT License; see
# the LICENSE file for more details.

import json
import typing as t
from dataclasses import dataclass
from enum import Enum

from bigbluebuttonbn_generator.util import UnknownRole, UnrecognizedSelectionType


if t.TYPE_CHECKING:
    from bigbluebuttonbn_generator.collaborators import Directory


__all__ = ('SelectionType', 'ParticipantRole', 'ParticipantRule', 'ParticipantResolver', 'CATCH_ALL_RULE')


class SelectionType(str, Enum):
    all = 'all'
    role = 'role'
    user = 'user'


class ParticipantRole(str, Enum):
    moderator = 'moderator'
    viewer = 'viewer'


@dataclass(frozen=True)
class ParticipantRule:
    selection_type: SelectionType
    selection_id: int | str
    role: ParticipantRole

    def to_dict(self):
        return {
            'selectiontype': self.selection_type.value,
            'selectionid': self.selection_id,
            'role': self.role.value,
        }


CATCH_ALL_RULE = ParticipantRule(SelectionType.all, 'all', ParticipantRole.viewer)

# keys of an instance record holding participant selections, in resolution order
ROLE_FIELDS = (
    ('moderators', ParticipantRole.moderator),
    ('viewers', ParticipantRole.viewer),
)


def dump_participants(rules):
    return json.dumps([rule.to_dict() for rule in rules])


class ParticipantResolver:
    """Turns participant selections into participant rules.

    A selection is a comma-separated list of ``type:name`` tokens, where the
    type is either ``role`` (a role shortname) or ``user`` (a username), e.g.
    ``role:editingteacher,user:alice``.

    :param directory: the directory used to look up role and user ids
    """

    def __init__(self, directory: 'Directory'):
        self.directory = directory

    def resolve_role_field(self, field: str, role: ParticipantRole) -> tuple[ParticipantRule, ...]:
        """Resolves the selection tokens of a single field.

        :param field: str -- the comma-separated selection
        :param role: ParticipantRole -- the role granted by every rule
        :raises: UnrecognizedSelectionType, UnknownRole, UnknownUser
        """
        role = ParticipantRole(role)
        tokens = [token for token in field.split(',') if token]
        if not tokens:
            return ()
        role_ids = self.directory.get_role_ids()
        return tuple(self._resolve_token(token, role, role_ids) for token in tokens)

    def _resolve_token(self, token, role, role_ids):
        type_, sep, name = token.partition(':')
        if not sep:
            raise UnrecognizedSelectionType(token)
        match type_:
            case SelectionType.role.value:
                if name not in role_ids:
                    raise UnknownRole(name)
                selection_id = role_ids[name]
            case SelectionType.user.value:
                selection_id = self.directory.get_user_id(name)
            case _:
                raise UnrecognizedSelectionType(token)
        return ParticipantRule(SelectionType(type_), selection_id, role)

    def resolve_participants(self, record: dict) -> tuple[ParticipantRule, ...]:
        """Builds the participant rules of an instance record.

        The ``moderators`` and ``viewers`` entries are removed from `record`.
        When at least one rule was resolved, a catch-all viewer rule is put in
        front of them. Without any rule the result is empty: everyone may view
        by default, but granting explicit roles requires covering everyone
        else explicitly.
        """
        rules = []
        for key, role in ROLE_FIELDS:
            if key in record:
                rules.extend(self.resolve_role_field(record.pop(key) or '', role))
        if rules:
            rules.insert(0, CATCH_ALL_RULE)
        return tuple(rules)
