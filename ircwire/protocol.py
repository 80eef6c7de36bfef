## protocol.py
# IRC protocol constants and errors.
import re

DEFAULT_ENCODING = 'utf-8'
FALLBACK_ENCODING = 'iso-8859-1'

DEFAULT_PORT = 6667


## Errors.

class ProtocolViolation(Exception):
    """ An error that occurred while parsing an IRC message that violates the IRC protocol. """
    def __init__(self, msg, message):
        super().__init__(msg)
        self.irc_message = message


## Limits.

# Includes the line separator.
MESSAGE_LENGTH_LIMIT = 510


## Message parsing.

LINE_SEPARATOR = '\r\n'
MINIMAL_LINE_SEPARATOR = '\n'

SOURCE_PREFIX = ':'
USER_SEPARATOR = '!'
HOST_SEPARATOR = '@'

ARGUMENT_SEPARATOR = re.compile(' +', re.UNICODE)
COMMAND_PATTERN = re.compile('^([a-zA-Z]+|[0-9]+)$', re.UNICODE)
TRAILING_PREFIX = ':'


## Numerics.

ERR_NOSUCHNICK = '401'
ERR_NICKNAMEINUSE = '433'
