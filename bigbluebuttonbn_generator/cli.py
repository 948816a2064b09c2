# This file is part of the CERN Indico plugins.
# Copyright (C) 2014 - 2026 CERN
#
# The CERN Indico plugins are free software; you can redistribute
# them and/or modify them under the terms of the MIT License; see
# the LICENSE file for more details.

import logging

import click
from lxml import etree

from bigbluebuttonbn_generator.api import MockServer
from bigbluebuttonbn_generator.util import GeneratorException


def _parse_pairs(ctx, param, values):
    pairs = []
    for value in values:
        name, sep, item = value.partition('=')
        if not sep or not name:
            raise click.BadParameter(f'expected name=value, got {value!r}', ctx=ctx, param=param)
        pairs.append((name, item))
    return pairs


def _build_mockdata(pairs):
    mockdata = {}
    for name, value in pairs:
        outer, sep, inner = name.partition('.')
        if sep:
            mockdata.setdefault(outer, {})[inner] = value
        else:
            mockdata[name] = value
    return mockdata


@click.group()
@click.option('--server', envvar='TEST_MOD_BIGBLUEBUTTONBN_MOCK_SERVER', required=True,
              help='Base URL of the mock BigBlueButton server')
@click.option('--timeout', type=click.IntRange(min=0), default=30, show_default=True,
              help='Seconds to wait for the server (0 to disable the timeout)')
@click.option('--verbose', '-v', is_flag=True, help='Log the requests sent to the server')
@click.pass_context
def cli(ctx, server, timeout, verbose):
    """Talk to the mock BigBlueButton server used by the activity tests."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    ctx.obj = MockServer(server, timeout)


@cli.command(name='reset')
@click.pass_obj
def reset_cmd(mock_server):
    """Remove all meetings and recordings from the mock server."""
    try:
        mock_server.reset()
    except GeneratorException as exc:
        click.secho(str(exc), fg='red', err=True)
        raise SystemExit(1)
    click.secho(f'Mock server {mock_server.api_endpoint} reset', fg='green')


@cli.command(name='request')
@click.argument('endpoint')
@click.option('--param', '-p', 'params', multiple=True, callback=_parse_pairs,
              help='Plain query parameter (name=value). Can be repeated.')
@click.option('--mockdata', '-m', multiple=True, callback=_parse_pairs,
              help='Mock data entry (key=value or outer.inner=value). Can be repeated.')
@click.pass_obj
def request_cmd(mock_server, endpoint, params, mockdata):
    """Send a request to ENDPOINT and print the XML reply."""
    try:
        reply = mock_server.request(endpoint, dict(params), _build_mockdata(mockdata))
    except GeneratorException as exc:
        click.secho(str(exc), fg='red', err=True)
        raise SystemExit(1)
    click.echo(etree.tostring(reply, pretty_print=True, encoding='unicode'), nl=False)
