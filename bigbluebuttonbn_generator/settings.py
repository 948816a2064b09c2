# This file is part of the CERN Indico plugins.
# Copyright (C) 2014 - 2026 CERN
#
# The CERN Indico plugins are free software; you can redistribute
# them and/or modify them under the terms of the MIT License; see
# the LICENSE file for more details.

from bigbluebuttonbn_generator.util import ConfigurationError


def normalize_url(url):
    return url.rstrip('/') + '/' if url else url


class GeneratorSettings:
    """Settings of a fixture generator, initialized from its `default_settings`.

    Only the names present in the defaults can be read or written.
    """

    converters = {
        'mock_server_url': normalize_url,
        'site_url': lambda url: url.rstrip('/') if url else url,
    }

    def __init__(self, defaults, **overrides):
        self._values = dict(defaults)
        self.set_multi(overrides)

    def _check_name(self, name):
        if name not in self._values:
            raise ConfigurationError(f'Unknown setting: {name}')

    def get(self, name):
        self._check_name(name)
        return self._values[name]

    def get_all(self):
        return dict(self._values)

    def set(self, name, value):
        self._check_name(name)
        if converter := self.converters.get(name):
            value = converter(value)
        self._values[name] = value

    def set_multi(self, items):
        for name, value in items.items():
            self.set(name, value)

    def __repr__(self):
        return f'<GeneratorSettings({self._values!r})>'
