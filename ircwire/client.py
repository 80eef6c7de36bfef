## client.py
# IRC client session: registration, read loop, reconnection and outbound helpers.
import asyncio
import logging
from asyncio import sleep

from . import __version__, connection, ctcp, events, parsing, protocol

__all__ = ['Error', 'ConfigurationError', 'AlreadyConnected', 'ReconnectError', 'Client']

DEFAULT_VERSION = 'ircwire v{}'.format(__version__)

# Session states.
DISCONNECTED = 'disconnected'
CONNECTING = 'connecting'
REGISTERING = 'registering'
ACTIVE = 'active'
RECONNECTING = 'reconnecting'
QUITTING = 'quitting'


class Error(Exception):
    """ Base class for all ircwire errors. """
    pass


class ConfigurationError(Error):
    pass


class AlreadyConnected(Error):
    def __init__(self):
        super().__init__('Client is already connected.')


class ReconnectError(Error):
    def __init__(self, attempts):
        super().__init__('Unable to reconnect after {} attempts, giving up.'.format(attempts))
        self.attempts = attempts


class Client:
    """
    IRC client.

    connect() opens the transport, registers and then reads from the server until the session ends:
    after quit(), on a fatal read error, or when reconnecting after the server closed the
    connection failed too often. Every message read is published on the event hub twice, under its
    command and under the wildcard event.
    """
    RECONNECT_MAX_ATTEMPTS = 10
    RECONNECT_DELAY = 5
    DEFAULT_QUIT_MESSAGE = 'Quitting'

    def __init__(self, nickname, username=None, realname=None, version=None,
                 hostname=None, port=None, connection=None, encoding=protocol.DEFAULT_ENCODING,
                 debug=False, logger=None, **kwargs):
        """ Create a client. Either a connection or a hostname to dial has to be given. """
        self._nickname = nickname
        self._current_nickname = None
        self.username = username
        self.realname = realname
        self.version = version or DEFAULT_VERSION

        self.hostname = hostname
        self.port = port
        self.encoding = encoding
        self.connection = connection

        self.debug = debug
        self.logger = logger or logging.getLogger(__name__)
        self.hub = events.EventHub(logger=self.logger)
        self.state = DISCONNECTED

        self._identity_lock = asyncio.Lock()
        self._send_lock = asyncio.Lock()
        self._quit = asyncio.Event()

        self._register_handlers()

        if kwargs:
            self.logger.warning('Unused arguments: %s', ', '.join(kwargs.keys()))

    def _register_handlers(self):
        self.hub.subscribe('PING', self.on_raw_ping)
        self.hub.subscribe('PRIVMSG', self.on_raw_privmsg)
        self.hub.subscribe(protocol.ERR_NICKNAMEINUSE, self.on_raw_433)
        self.hub.subscribe(protocol.ERR_NOSUCHNICK, self.on_raw_401)

    ## Connection.

    def run(self):
        """ Connect and run until the session ends. """
        asyncio.run(self.connect())

    async def connect(self):
        """
        Connect to IRC server, register and handle messages until the session ends.
        Returns normally after quit(); raises ConfigurationError, ReconnectError or the I/O error that ended the session.
        """
        if self.state != DISCONNECTED:
            raise AlreadyConnected()

        self._quit = asyncio.Event()
        try:
            await self._connect()
            await self.handle_forever()
        finally:
            # Also reached when the session task is cancelled.
            await self._disconnect()
            self.state = DISCONNECTED

    async def _connect(self):
        """ Open the transport if needed and send the registration commands. """
        if self.connection is None and not self.hostname:
            raise ConfigurationError('No connection or hostname given, pass either connection= or hostname=.')
        if not self._nickname:
            raise ConfigurationError('No nickname given.')
        self.state = CONNECTING

        # Registration always starts out with the nickname we want.
        async with self._identity_lock:
            self._current_nickname = self._nickname
        self.username = self.username or self._nickname
        self.realname = self.realname or self._nickname

        if self.connection is None:
            self.connection = self._create_connection()
        if not self.connection.connected:
            await self.connection.connect()

        # There is no waiting for RPL_WELCOME: servers differ too much in what they send first.
        self.state = REGISTERING
        await self.raw('USER {} * * :{}'.format(self.username, self.realname))
        await self.set_nickname(self._current_nickname)

    def _create_connection(self):
        return connection.Connection(self.hostname, self.port, encoding=self.encoding)

    async def _disconnect(self):
        """ Close and drop the transport. """
        connection, self.connection = self.connection, None
        if connection is not None:
            await connection.disconnect()

    async def _reconnect(self):
        """ Reconnect after the server closed the connection, backing off exponentially between attempts. """
        self.state = RECONNECTING
        await self._disconnect()

        delay = self.RECONNECT_DELAY
        for attempt in range(1, self.RECONNECT_MAX_ATTEMPTS + 1):
            self.logger.error('Connection closed. Attempting to reconnect in %s seconds.', delay)
            await sleep(delay)
            if self._quit.is_set():
                return

            try:
                await self._connect()
            except (Error, OSError, asyncio.TimeoutError) as e:
                self.logger.warning('Reconnect attempt %d failed: %s', attempt, e)
                await self._disconnect()
                delay *= 2
            else:
                return

        self.logger.error('Unable to reconnect. Giving up.')
        raise ReconnectError(self.RECONNECT_MAX_ATTEMPTS)

    async def handle_forever(self):
        """
        Read and dispatch messages until the session ends.
        quit() is only noticed between two reads: a read that is blocked keeps blocking until a line
        arrives or the transport is closed.
        """
        self.state = ACTIVE
        while True:
            if self._quit.is_set():
                await self._disconnect()
                return

            try:
                line = await self.connection.recv()
            except Exception:
                await self._disconnect()
                if self._quit.is_set():
                    self.logger.debug('Read failed after quitting, ending session.', exc_info=True)
                    return
                raise

            if not line:
                # End of stream.
                if self._quit.is_set():
                    await self._disconnect()
                    return
                await self._reconnect()
                self.state = ACTIVE
                continue

            if self.debug:
                self.logger.debug('<< %s', line.rstrip(protocol.LINE_SEPARATOR))
            await self.on_data(line)

    async def on_data(self, line):
        """ Handle a single received line. """
        try:
            message = parsing.parse(line)
        except protocol.ProtocolViolation as e:
            self.logger.warning('Skipping malformed message from server: %r (%s)', line, e)
            return

        # Blank line.
        if not message.command:
            return

        self.hub.publish(message.command, message)
        self.hub.publish(events.WILDCARD, message)

    ## Event registration.

    def handle(self, event, handler):
        """ Register handler for event: a command, a numeric reply code, or '*' for every message. """
        self.hub.subscribe(event, handler)

    def unhandle(self, event, handler):
        self.hub.unsubscribe(event, handler)

    def on(self, event):
        """ Decorator form of handle(). """
        def decorator(handler):
            self.handle(event, handler)
            return handler
        return decorator

    ## IRC attributes.

    @property
    def connected(self):
        """ Whether or not we are connected. """
        return self.connection is not None and self.connection.connected

    @property
    def nickname(self):
        """ The nickname we currently hold on the server, or are trying to. None before connecting. """
        return self._current_nickname

    @property
    def desired_nickname(self):
        return self._nickname

    ## IRC API.

    async def raw(self, message):
        """
        Send raw line. The line separator is added and the result is cut to the protocol length limit.
        Does nothing when not connected.
        """
        connection = self.connection
        if connection is None or not connection.connected:
            return

        line = message + protocol.LINE_SEPARATOR
        if len(line) > protocol.MESSAGE_LENGTH_LIMIT:
            line = line[:protocol.MESSAGE_LENGTH_LIMIT - len(protocol.LINE_SEPARATOR)] + protocol.LINE_SEPARATOR

        if self.debug:
            self.logger.debug('>> %s', line.rstrip(protocol.LINE_SEPARATOR))
        async with self._send_lock:
            await connection.send(line)

    async def rawmsg(self, command, *args):
        """ Send raw message built from a command and its parameters. """
        await self.raw(parsing.construct(command, *args))

    async def message(self, target, message):
        """ Message channel or user. Long messages are split on word boundaries over several lines. """
        for line in message.replace('\r', '').split('\n'):
            # Some IRC servers respond with "412 Bot :No text to send" on empty messages.
            await self._send_split('PRIVMSG {} :'.format(target), line or ' ')

    async def notice(self, target, message):
        """ Notice channel or user. """
        for line in message.replace('\r', '').split('\n'):
            await self._send_split('NOTICE {} :'.format(target), line)

    async def _send_split(self, prefix, message):
        size = protocol.MESSAGE_LENGTH_LIMIT - len(protocol.LINE_SEPARATOR) - len(prefix)
        for chunk in split_message(message, size):
            await self.raw(prefix + chunk)

    async def ctcp(self, target, query, contents=None):
        """ Send a CTCP request to a target. """
        await self.raw('PRIVMSG {} :{}'.format(target, ctcp.construct_ctcp(query, contents)))

    async def ctcp_reply(self, target, query, response):
        """ Send a CTCP reply to a target. Replies are never split, an overlong one is truncated by raw(). """
        await self.raw('NOTICE {} :{}'.format(target, ctcp.construct_ctcp(query, response)))

    async def set_nickname(self, nickname):
        """
        Request nickname change.
        This does not change what the client considers its nickname: only registration, collision
        handling and reclaim_nickname() do that.
        """
        await self.rawmsg('NICK', nickname)

    async def whois(self, nickname):
        await self.rawmsg('WHOIS', nickname)

    async def set_mode(self, target, *modes):
        """ Set mode on target, e.g. set_mode('#channel', '+o', 'nick'). """
        await self.rawmsg('MODE', target, *modes)

    async def reclaim_nickname(self):
        """
        Try to get our desired nickname back if we registered with a fallback.
        This sends a WHOIS for it; on_raw_401 takes the nickname when the server says nobody has it.
        """
        async with self._identity_lock:
            if self._current_nickname != self._nickname:
                await self.whois(self._nickname)

    async def quit(self, message=None):
        """ Quit network. The read loop ends before its next read. """
        if message is None:
            message = self.DEFAULT_QUIT_MESSAGE
        if self.state != DISCONNECTED:
            self.state = QUITTING

        try:
            await self.raw('QUIT :{}'.format(message))
        except OSError as e:
            # We are going away either way.
            self.logger.debug('Failed to send QUIT: %s', e)
        self._quit.set()

    ## IRC helpers.

    def is_same_nick(self, left, right):
        """ Check if given nicknames are equal. """
        return left.lower() == right.lower()

    ## Built-in handlers.

    async def on_raw_ping(self, message):
        """ PING command. """
        # Respond with a pong.
        if message.params:
            await self.raw('PONG {}'.format(message.params))
        else:
            await self.raw('PONG')
        await self.reclaim_nickname()

    async def on_raw_privmsg(self, message):
        """ PRIVMSG command: answer CTCP VERSION queries. """
        query = message.trailing
        if not message.name or not ctcp.is_ctcp(query):
            return

        type, contents = ctcp.parse_ctcp(query)
        if type == 'VERSION':
            await self.ctcp_reply(message.name, 'VERSION', self.version)

    async def on_raw_433(self, message):
        """ Nickname in use: retry with the rejected nickname plus an underscore. """
        # 433 <client> <nickname> :<reason>
        if len(message.args) > 2:
            rejected = message.args[1]
        else:
            rejected = self._current_nickname
        async with self._identity_lock:
            self._current_nickname = rejected + '_'
            await self.set_nickname(self._current_nickname)

    async def on_raw_401(self, message):
        """ No such nick/channel. If it is the nickname we want, take it. """
        if len(message.args) < 2:
            return

        nickname = message.args[1]
        async with self._identity_lock:
            if not self.is_same_nick(nickname, self._nickname):
                return
            if self._current_nickname == self._nickname:
                return
            self._current_nickname = self._nickname
            await self.set_nickname(self._nickname)


## Helpers.

def chunkify(message, chunksize):
    if not message:
        yield message
    else:
        while message:
            chunk = message[:chunksize]
            message = message[chunksize:]
            yield chunk


def split_message(message, size):
    """
    Pack the words of message into as few chunks of at most size characters as possible, keeping their order.
    Words longer than size are cut up.
    """
    size = max(size, 1)
    if len(message) <= size:
        yield message
        return

    chunk = None
    for word in message.split(' '):
        for piece in chunkify(word, size):
            if chunk is None:
                chunk = piece
            elif len(chunk) + 1 + len(piece) <= size:
                chunk += ' ' + piece
            else:
                yield chunk
                chunk = piece

    if chunk is not None:
        yield chunk
