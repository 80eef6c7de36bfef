import asyncio
from .mocks import MockServer, MockClient

DEFAULT_OPTIONS = {
    'username': 'bar',
    'realname': 'foo bar',
    'version': 'the irc lib',
    'hostname': 'mock://local',
    'port': 1337,
}


def with_client(connected=True, nickname='foo', **options):
    """
    Run the decorated test with a client talking to a MockServer.
    When connected, the client session runs in the background; the registration lines are not consumed.
    """
    options = dict(DEFAULT_OPTIONS, **options)

    def inner(f):
        async def run():
            server = MockServer()
            client = MockClient(nickname, mock_server=server, **options)
            session = None
            if connected:
                session = asyncio.ensure_future(client.connect())
                # Let the client open its connection.
                while server.connection is None and not session.done():
                    await asyncio.sleep(0)

            try:
                return await f(client=client, server=server, session=session)
            finally:
                if session is not None and not session.done():
                    session.cancel()
                    await asyncio.gather(session, return_exceptions=True)

        run.__name__ = f.__name__
        return run
    return inner


async def run_script(server, script):
    """
    Play a conversation script. 'CLI <line>' waits for the client to send line,
    'SRV <line>' sends line to the client.
    """
    for entry in script:
        kind, line = entry[:3], entry[4:]
        if kind == 'CLI':
            sent = await server.expect()
            assert sent == line, 'client sent {!r}, expected {!r}'.format(sent, line)
        elif kind == 'SRV':
            server.send(line)
        else:
            raise ValueError('Unknown script entry: {!r}'.format(entry))
