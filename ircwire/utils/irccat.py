#!/usr/bin/env python3
## irccat.py
# Simple irccat implementation, using ircwire.
import sys
import logging
import asyncio

from .. import Client, __version__
from . import _args


class IRCCat(Client):
    """ irccat. Takes raw messages on stdin, dumps raw messages to stdout. Life has never been easier. """

    def __init__(self, *args, version=None, **kwargs):
        version = version or 'ircwire-irccat v{}'.format(__version__)
        super().__init__(*args, version=version, **kwargs)
        self.async_stdin = None
        self.stdin_task = None
        self.handle('*', self.on_any)
        self.handle('001', self.on_welcome)

    async def process_stdin(self):
        """ Send every line read from stdin to the server until stdin is exhausted, then quit. """
        loop = asyncio.get_running_loop()

        self.async_stdin = asyncio.StreamReader()
        reader_protocol = asyncio.StreamReaderProtocol(self.async_stdin)
        await loop.connect_read_pipe(lambda: reader_protocol, sys.stdin)

        while True:
            line = await self.async_stdin.readline()
            if not line:
                break
            await self.raw(line.decode(self.encoding).rstrip('\r\n'))

        await self.quit('EOF')

    def on_any(self, message):
        print(message.raw)

    def on_welcome(self, message):
        """ Start forwarding stdin once registration is done. """
        if self.stdin_task is None:
            self.stdin_task = asyncio.ensure_future(self.process_stdin())


async def _main():
    # Create client.
    irccat = _args.client_from_args('irccat', default_nick='irccat',
                                    description='Process raw IRC messages from stdin, dump received IRC messages to stdout.',
                                    cls=IRCCat)
    try:
        await irccat.connect()
    finally:
        if irccat.stdin_task:
            irccat.stdin_task.cancel()


def main():
    # Setup logging.
    logging.basicConfig(format='!! %(levelname)s: %(message)s')
    asyncio.run(_main())


if __name__ == '__main__':
    main()
