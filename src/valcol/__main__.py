# SPDX-FileCopyrightText: 2026-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Sequence

from websockets.exceptions import WebSocketException

from valcol.__info__ import __version__
from valcol.configuration import ConfigurationError, StoreConfiguration, configuration_template, default_configuration_file
from valcol.link import ValidationStream
from valcol.pipeline import ValidationCollector
from valcol.storage import DatabaseStore, StoreError

__all__ = 'main', 'run'


log = logging.getLogger('valcol')


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog='valcol', description='Collect signed validations from the validations stream and store the verified ones.')
    parser.add_argument('--url', default=os.environ.get('wss', 'ws://localhost:6006'), help='the websocket URL of the server to subscribe to (default: $wss or %(default)s)')
    parser.add_argument('--config', default=default_configuration_file, help='the file holding the database credentials (default: %(default)s)')
    parser.add_argument('--create-schema', action='store_true', help='create the validations table if it does not exist')
    parser.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], help='the logging level (default: %(default)s)')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser.parse_args(argv)


async def run(url: str, configuration: StoreConfiguration, *, create_schema: bool = False) -> None:
    store = DatabaseStore.from_url(configuration.url)
    collector = ValidationCollector(store)
    stream = ValidationStream(url, collector)
    try:
        if create_schema:
            await store.create_schema()
        await stream.run()
    finally:
        await collector.drain()
        await store.close()


def main(argv: Sequence[str] | None = None) -> None:
    arguments = parse_arguments(argv)

    logging.basicConfig(level=arguments.log_level, format='%(asctime)s %(levelname)-8s %(name)s: %(message)s')

    try:
        configuration = StoreConfiguration.load(arguments.config)
    except ConfigurationError as exc:
        log.critical('Failed to read the database credentials: %s', exc)
        print(f'Expecting:\n{configuration_template}', file=sys.stderr)
        sys.exit(1)

    try:
        asyncio.run(run(arguments.url, configuration, create_schema=arguments.create_schema))
    except KeyboardInterrupt:
        pass
    except (StoreError, WebSocketException, OSError) as exc:
        log.critical('%s', exc)
        sys.exit(1)


if __name__ == '__main__':
    main()
