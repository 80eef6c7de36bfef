import asyncio

from . import protocol

__all__ = ['Connection']


class Connection:
    """ A TCP connection over the IRC protocol. """
    CONNECT_TIMEOUT = 10

    def __init__(self, hostname=None, port=None, source_address=None, encoding=protocol.DEFAULT_ENCODING):
        self.hostname = hostname
        self.port = port or protocol.DEFAULT_PORT
        self.source_address = source_address
        self.encoding = encoding

        self.reader = None
        self.writer = None

    @classmethod
    def from_streams(cls, reader, writer, encoding=protocol.DEFAULT_ENCODING):
        """ Wrap an already opened stream pair. """
        connection = cls(encoding=encoding)
        connection.reader = reader
        connection.writer = writer
        return connection

    async def connect(self):
        """ Connect to target. """
        if self.connected:
            return
        if not self.hostname:
            raise ValueError('Have to specify hostname to open a connection.')

        (self.reader, self.writer) = await asyncio.wait_for(
            asyncio.open_connection(
                host=self.hostname,
                port=self.port,
                local_addr=self.source_address
            ),
            timeout=self.CONNECT_TIMEOUT
        )

    async def disconnect(self):
        """ Disconnect from target. """
        if not self.connected:
            return

        writer = self.writer
        self.reader = None
        self.writer = None
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            # The peer already went away, nothing left to clean up.
            pass

    @property
    def connected(self):
        """ Whether this connection is... connected to something. """
        return self.reader is not None and self.writer is not None

    async def send(self, data):
        """ Write a complete line. """
        if isinstance(data, str):
            data = data.encode(self.encoding)
        self.writer.write(data)
        await self.writer.drain()

    async def recv(self):
        """ Read a single line. Returns an empty string at end of stream. """
        if not self.connected:
            return ''

        line = await self.reader.readline()
        try:
            return line.decode(self.encoding)
        except UnicodeDecodeError:
            # Try our fallback encoding.
            return line.decode(protocol.FALLBACK_ENCODING)
