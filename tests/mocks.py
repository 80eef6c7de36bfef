import asyncio
import ircwire

from unittest.mock import Mock


class MockServer:
    """
    A mock server that will receive lines from the client,
    and can send its own lines.
    """

    def __init__(self):
        self.connection = None
        self.connects = 0
        self.refuse_connections = 0
        self.received = []
        self._lines = asyncio.Queue()

    def receive(self, data):
        for line in data.split('\r\n')[:-1]:
            self.received.append(line)
            self._lines.put_nowait(line)

    async def expect(self, timeout=1):
        """ Wait for the next line sent by the client. """
        return await asyncio.wait_for(self._lines.get(), timeout=timeout)

    async def expect_nothing(self, timeout=0.1):
        try:
            line = await asyncio.wait_for(self._lines.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return True
        raise AssertionError('Client unexpectedly sent {!r}'.format(line))

    def send(self, line):
        self.connection.feed(line + '\r\n')

    def sendraw(self, data):
        self.connection.feed(data)

    def close(self):
        """ Close the connection from our side: the client reads end of stream. """
        self.connection.feed('')

    def fail(self, exception):
        self.connection.feed(exception)


class MockConnection(ircwire.connection.Connection):
    """A mock connection between a client and a server."""

    def __init__(self, *args, mock_server=None, **kwargs):
        super().__init__(*args, **kwargs)
        self._mock_connected = False
        self._mock_server = mock_server
        self._inbound = asyncio.Queue()

    @property
    def connected(self):
        return self._mock_connected

    async def connect(self):
        if self._mock_server.refuse_connections:
            self._mock_server.refuse_connections -= 1
            raise ConnectionRefusedError('Connection refused by mock server.')

        self._mock_server.connection = self
        self._mock_server.connects += 1
        self._mock_connected = True

    async def disconnect(self):
        if self._mock_server.connection is self:
            self._mock_server.connection = None
        self._mock_connected = False

    def feed(self, data):
        self._inbound.put_nowait(data)

    async def send(self, data):
        self._mock_server.receive(data)

    async def recv(self):
        data = await self._inbound.get()
        if isinstance(data, Exception):
            raise data
        return data


class MockClient(ircwire.Client):
    """A client that subtitutes its own connection for a mock connection to MockServer."""

    def __init__(self, *args, mock_server=None, logger=None, **kwargs):
        self._mock_server = mock_server
        super().__init__(*args, logger=logger or Mock(), **kwargs)

    def _create_connection(self):
        return MockConnection(self.hostname, self.port, mock_server=self._mock_server)
