__name__ = 'ircwire'
__version__ = '0.3.0'
__version_info__ = (0, 3, 0)
__license__ = 'BSD'

from . import protocol, parsing, events, connection, client

from .client import Error, ConfigurationError, AlreadyConnected, ReconnectError, Client
from .connection import Connection
from .events import EventHub, WILDCARD
from .parsing import Message, parse
from .protocol import ProtocolViolation
