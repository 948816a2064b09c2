# This file is part of the CERN Indico plugins.
# Copyright (C) 2014 - 2026 CERN
#
# The CERN Indico plugins are free software; you can redistribute
# them and/or modify them under the terms of the MIT License; see
# the LICENSE file for more details.

import logging
from pprint import pformat
from urllib.parse import urljoin

import requests
from lxml import etree
from requests.exceptions import HTTPError, RequestException, Timeout

from bigbluebuttonbn_generator.settings import normalize_url
from bigbluebuttonbn_generator.util import ConfigurationError, TransportError, flatten_params, param_value


__all__ = ('MockServer', 'element_to_data')


logger = logging.getLogger('bigbluebuttonbn_generator.api')


def _make_parser():
    return etree.XMLParser(strip_cdata=True, remove_blank_text=True)


def element_to_data(element):
    """Converts a parsed reply into plain python data.

    Elements without children or attributes become their text (``''`` when
    empty). Other elements become a dict keyed by tag, repeated tags being
    collected into a list. Attributes are kept under ``@attributes`` and the
    text of an element that has attributes but no children under ``@text``.
    Comments and processing instructions are skipped.
    """
    children = list(element.iterchildren(tag=etree.Element))
    if not children and not element.attrib:
        return element.text or ''
    data = {}
    if element.attrib:
        data['@attributes'] = dict(element.attrib)
        if not children and element.text:
            data['@text'] = element.text
    for child in children:
        value = element_to_data(child)
        if child.tag not in data:
            data[child.tag] = value
        elif isinstance(data[child.tag], list):
            data[child.tag].append(value)
        else:
            data[child.tag] = [data[child.tag], value]
    return data


class MockServer:
    """Client for the stand-in BigBlueButton server used by tests.

    All data travels as query parameters of a GET request, including the
    payload of the "create" endpoints. Replies are XML documents.

    :param api_endpoint: str -- the base URL of the mock server
    :param timeout: int -- seconds to wait for a reply (`None` or 0 to wait
        forever)
    """

    def __init__(self, api_endpoint, timeout=None):
        if not api_endpoint:
            raise ConfigurationError('The mock server URL is not set')
        self.api_endpoint = normalize_url(api_endpoint)
        self.timeout = timeout or None

    def __repr__(self):
        return f'<MockServer({self.api_endpoint})>'

    def get_url(self, endpoint=''):
        # endpoints are always relative to the base URL, including its path
        return urljoin(self.api_endpoint, endpoint.lstrip('/'))

    def build_params(self, params=None, mockdata=None):
        """Returns the ordered query parameters of a mock request.

        The explicit `params` come first, followed by the flattened `mockdata`.
        """
        query = [(name, param_value(value)) for name, value in (params or {}).items()]
        query += flatten_params(mockdata or {})
        return query

    def request(self, endpoint, params=None, mockdata=None):
        """Sends a request to the given mock server endpoint.

        :param endpoint: str -- the endpoint, relative to the server URL
        :param params: dict -- plain query parameters
        :param mockdata: dict -- data to flatten into query parameters
        :returns: the root element of the XML reply
        :raises: TransportError if the server can't be reached, replies with
            an error status or with anything else than XML
        """
        url = self.get_url(endpoint)
        query = self.build_params(params, mockdata)
        logger.debug('Mock request:\nURL: %s\nParams: %s', url, pformat(query))

        try:
            response = requests.get(url, params=query, timeout=self.timeout)
            response.raise_for_status()
        except Timeout as error:
            logger.warning('GET %s timed out: %s', url, error)
            raise TransportError(f'Timeout while contacting the mock server ({endpoint})', endpoint) from error
        except HTTPError as error:
            logger.exception('GET %s failed with %s', response.url, error)
            raise TransportError(f'Mock server replied with status {response.status_code} ({endpoint})', endpoint,
                                 response.text) from error
        except RequestException as error:
            logger.exception('failed call: GET %s with %s: %s', endpoint, query, error)
            raise TransportError(f'Could not contact the mock server ({endpoint})', endpoint) from error

        return self._parse_reply(endpoint, response.content)

    def _parse_reply(self, endpoint, content):
        try:
            return etree.fromstring(content, _make_parser())
        except (etree.XMLSyntaxError, ValueError) as error:
            logger.error('Invalid XML reply from %s: %r', endpoint, content)
            raise TransportError(f'Invalid XML response: {content!r}', endpoint, content) from error

    def reset(self):
        return self.request('backoffice/reset')

    def create_meeting(self, config):
        return self.request('backoffice/createMeeting', mockdata=config)

    def create_recording(self, config):
        """Creates a recording and returns the identifier the server assigned to it."""
        endpoint = 'backoffice/createRecording'
        reply = self.request(endpoint, mockdata=config)
        if not (recording_id := reply.findtext('recordID')):
            raise TransportError('The mock server did not return a recording id', endpoint,
                                 etree.tostring(reply, encoding='unicode'))
        return recording_id

    def fetch_recording(self, meeting_id, recording_id):
        """Fetches the mock payload of a recording.

        :returns: dict -- the reply converted with `element_to_data`
        """
        reply = self.request('backoffice/recordings', params={'meetingID': meeting_id, 'recordID': recording_id})
        return element_to_data(reply)
