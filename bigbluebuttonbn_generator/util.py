# This file is part of the CERN Indico plugins.
# Copyright (C) 2014 - 2026 CERN
#
# The CERN Indico plugins are free software; you can redistribute
# them and/or modify them under the terms of the MIT License; see
# the LICENSE file for more details.

import typing as t
from collections.abc import Mapping
from enum import Enum


_TRUE_VALUES = {'1', 'true', 'on', 'yes'}


def flatten_params(config: t.Mapping[str, t.Any]) -> list[tuple[str, str]]:
    """Flattens a configuration mapping into ordered query parameters.

    Scalar values become one parameter named after their key. Mapping values
    become one parameter per inner entry, named ``{outer}_{inner}``. Only one
    level of nesting is supported.

    :param config: dict -- the configuration to flatten
    :returns: list -- ``(name, value)`` tuples in insertion order
    :raises: TypeError if a mapping is nested more than one level deep
    """
    params = []
    for key, value in config.items():
        if isinstance(value, Mapping):
            for subkey, subvalue in value.items():
                if isinstance(subvalue, Mapping):
                    raise TypeError(f'Cannot flatten nested mapping {key}.{subkey}')
                params.append((f'{key}_{subkey}', param_value(subvalue)))
        else:
            params.append((key, param_value(value)))
    return params


def param_value(value) -> str:
    """Renders a single value the way it travels in a query string."""
    if value is None:
        return ''
    elif isinstance(value, bool):
        return 'true' if value else 'false'
    elif isinstance(value, Enum):
        return str(value.value)
    return str(value)


def parse_bool(value) -> bool:
    """Interprets a loosely typed flag (``'1'``, ``'yes'``, ``True``...) as a boolean."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_VALUES


class GeneratorException(Exception):
    """Indicates a fixture could not be built and the cause of the failure.

    Every error raised while building fixtures is fatal for the test which
    requested it. The `reason` attribute gives a machine readable cause.
    """
    def __init__(self, message, reason='operation-failed'):
        super().__init__(message)
        self.reason = reason


class ConfigurationError(GeneratorException):
    """Indicates a required field or setting is missing or invalid."""

    def __init__(self, message):
        super().__init__(message, 'configuration')


class ParticipantError(GeneratorException):
    pass


class UnrecognizedSelectionType(ParticipantError):
    def __init__(self, token):
        super().__init__(f"Unknown participant type: '{token}'", 'unrecognized-selection-type')
        self.token = token


class UnknownRole(ParticipantError):
    def __init__(self, name):
        super().__init__(f"Unknown role '{name}'", 'unknown-role')
        self.name = name


class NotFoundError(GeneratorException):
    def __init__(self, message, reason='not-found'):
        super().__init__(message, reason)


class UnknownUser(NotFoundError, ParticipantError):
    def __init__(self, username):
        super().__init__(f"User '{username}' not found", 'unknown-user')
        self.username = username


class TransportError(GeneratorException):
    """Indicates the mock server could not be reached or replied with garbage.

    :param endpoint: the endpoint which was called
    :param response: the raw response body, if one was received
    """

    def __init__(self, message, endpoint, response=None):
        super().__init__(message, 'transport')
        self.endpoint = endpoint
        self.response = response
