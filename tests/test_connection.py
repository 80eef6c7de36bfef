import asyncio

import pytest
import ircwire
from ircwire.connection import Connection


class LineServer:
    """ A loopback TCP server that records what it receives and lets tests write back. """

    def __init__(self):
        self.server = None
        self.reader = None
        self.writer = None
        self.accepted = asyncio.Event()

    async def start(self):
        self.server = await asyncio.start_server(self.on_client, '127.0.0.1', 0)
        return self.server.sockets[0].getsockname()[1]

    async def on_client(self, reader, writer):
        self.reader = reader
        self.writer = writer
        self.accepted.set()

    async def stop(self):
        if self.writer:
            self.writer.close()
        self.server.close()
        await self.server.wait_closed()


@pytest.mark.asyncio
async def test_connection_roundtrip():
    server = LineServer()
    port = await server.start()
    try:
        connection = Connection('127.0.0.1', port)
        assert not connection.connected
        await connection.connect()
        assert connection.connected
        await asyncio.wait_for(server.accepted.wait(), timeout=1)

        await connection.send('NICK foo\r\n')
        assert await asyncio.wait_for(server.reader.readline(), timeout=1) == b'NICK foo\r\n'

        server.writer.write(b'PING :caf\xc3\xa9\r\nPING :caf\xe9\r\n')
        await server.writer.drain()
        assert await asyncio.wait_for(connection.recv(), timeout=1) == 'PING :café\r\n'
        assert await asyncio.wait_for(connection.recv(), timeout=1) == 'PING :café\r\n'

        # End of stream.
        server.writer.close()
        assert await asyncio.wait_for(connection.recv(), timeout=1) == ''

        await connection.disconnect()
        assert not connection.connected
        assert await connection.recv() == ''
    finally:
        await server.stop()


@pytest.mark.asyncio
async def test_connection_from_streams():
    server = LineServer()
    port = await server.start()
    try:
        reader, writer = await asyncio.open_connection('127.0.0.1', port)
        connection = Connection.from_streams(reader, writer)
        assert connection.connected

        # Already open: connect() does nothing.
        await connection.connect()
        await asyncio.wait_for(server.accepted.wait(), timeout=1)
        await connection.send(b'PONG :x\r\n')
        assert await asyncio.wait_for(server.reader.readline(), timeout=1) == b'PONG :x\r\n'
        await connection.disconnect()
    finally:
        await server.stop()


@pytest.mark.asyncio
async def test_connection_without_hostname():
    with pytest.raises(ValueError):
        await Connection().connect()


@pytest.mark.asyncio
@pytest.mark.slow
async def test_client_over_tcp():
    server = LineServer()
    port = await server.start()
    try:
        client = ircwire.Client('foo', hostname='127.0.0.1', port=port)
        session = asyncio.ensure_future(client.connect())
        await asyncio.wait_for(server.accepted.wait(), timeout=1)

        assert await asyncio.wait_for(server.reader.readline(), timeout=1) == b'USER foo * * :foo\r\n'
        assert await asyncio.wait_for(server.reader.readline(), timeout=1) == b'NICK foo\r\n'

        server.writer.write(b'PING :irc.example.net\r\n')
        await server.writer.drain()
        assert await asyncio.wait_for(server.reader.readline(), timeout=1) == b'PONG :irc.example.net\r\n'

        await client.quit('bye')
        assert await asyncio.wait_for(server.reader.readline(), timeout=1) == b'QUIT :bye\r\n'
        server.writer.close()
        assert await asyncio.wait_for(session, timeout=1) is None
    finally:
        await server.stop()
