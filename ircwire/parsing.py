## parsing.py
# IRC message parsing and construction.
import collections

from . import protocol

__all__ = ['Message', 'parse', 'parse_user', 'construct']

_MessageFields = collections.namedtuple('_MessageFields', 'raw name user host command params args')


class Message(_MessageFields):
    """
    A single parsed IRC line.

    `raw` is the line as received, minus its separator. `name`, `user` and `host` come from the
    message prefix and are empty when the line had none. `params` is the unsplit parameter tail,
    `args` the same tail split on spaces; a token starting with ':' is kept as-is and not joined
    with the words following it.
    """
    __slots__ = ()

    @classmethod
    def parse(cls, line, encoding=protocol.DEFAULT_ENCODING):
        return parse(line, encoding=encoding)

    @classmethod
    def empty(cls):
        return cls(raw='', name='', user='', host='', command='', params='', args=())

    @property
    def source(self):
        """ The message prefix, reassembled. """
        source = self.name
        if self.user:
            source += protocol.USER_SEPARATOR + self.user
        if self.host:
            source += protocol.HOST_SEPARATOR + self.host
        return source

    @property
    def trailing(self):
        """ Text of the final parameter, with a trailing parameter's spaces intact and its ':' removed. """
        if self.params.startswith(protocol.TRAILING_PREFIX):
            return self.params[len(protocol.TRAILING_PREFIX):]

        index = self.params.find(' ' + protocol.TRAILING_PREFIX)
        if index >= 0:
            return self.params[index + len(protocol.TRAILING_PREFIX) + 1:]
        if self.args:
            return self.args[-1]
        return ''

    def construct(self):
        """ Rebuild a protocol line from the parsed fields, without line separator. """
        if not self.command:
            return ''

        message = self.command
        if self.params:
            message += ' ' + self.params
        if self.source:
            message = protocol.SOURCE_PREFIX + self.source + ' ' + message
        return message

    def __str__(self):
        return self.construct()


def parse(line, encoding=protocol.DEFAULT_ENCODING):
    """
    Parse given line into IRC message structure.
    Returns a Message, or raises ProtocolViolation when no command can be found.
    """
    # Decode message.
    if isinstance(line, bytes):
        try:
            line = line.decode(encoding)
        except UnicodeDecodeError:
            # Try our fallback encoding.
            line = line.decode(protocol.FALLBACK_ENCODING)

    # Strip message separator.
    message = line.rstrip(protocol.LINE_SEPARATOR)
    # Blank lines are valid no-ops.
    if not message:
        return Message.empty()

    # Extract message sections.
    # Format: (:source )? command parameters?
    name = user = host = ''
    rest = message
    if message.startswith(protocol.SOURCE_PREFIX):
        source, separator, rest = message[len(protocol.SOURCE_PREFIX):].partition(' ')
        if not separator:
            raise protocol.ProtocolViolation('Malformed message: no command after prefix.', message=message)
        name, user, host = parse_user(source)

    command, _, params = rest.lstrip(' ').partition(' ')
    if not protocol.COMMAND_PATTERN.match(command):
        raise protocol.ProtocolViolation('Malformed message: invalid command {!r}.'.format(command), message=message)

    stripped = params.strip(' ')
    if stripped:
        args = tuple(protocol.ARGUMENT_SEPARATOR.split(stripped))
    else:
        args = ()

    return Message(raw=message, name=name, user=user, host=host,
                   command=command.upper(), params=params, args=args)


def parse_user(raw):
    """ Parse nick(!user)?(@host)? structure. Missing parts are returned as empty strings. """
    raw, _, host = raw.partition(protocol.HOST_SEPARATOR)
    nick, _, user = raw.partition(protocol.USER_SEPARATOR)
    return nick, user, host


def construct(command, *params):
    """
    Construct a raw IRC line from a command and its parameters, without line separator.
    The final parameter is sent as a trailing parameter when it has to be.
    """
    command = str(command)
    if not protocol.COMMAND_PATTERN.match(command):
        raise protocol.ProtocolViolation('The constructed command does not follow the command pattern ({pat})'.format(
            pat=protocol.COMMAND_PATTERN.pattern), message=command)
    message = command.upper()

    for idx, param in enumerate(params):
        param = str(param)
        if any(ch in param for ch in protocol.LINE_SEPARATOR + '\0'):
            raise protocol.ProtocolViolation('Parameters can not contain line separators or NUL characters.', message=param)

        # Trailing parameter?
        if not param or ' ' in param or param.startswith(protocol.TRAILING_PREFIX):
            if idx + 1 < len(params):
                raise protocol.ProtocolViolation('Only the final parameter of an IRC message can be trailing and thus contain spaces, or start with a colon.', message=param)
            message += ' ' + protocol.TRAILING_PREFIX + param
        # Regular parameter.
        else:
            message += ' ' + param

    return message
