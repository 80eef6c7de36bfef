## ctcp.py
# Client-to-Client-Protocol (CTCP) framing.
import re

__all__ = ['CTCP_DELIMITER', 'is_ctcp', 'construct_ctcp', 'parse_ctcp']


CTCP_DELIMITER = '\x01'
CTCP_ESCAPE_CHAR = '\x16'
CTCP_QUOTED = re.compile(CTCP_ESCAPE_CHAR + '(.)', re.DOTALL)
CTCP_UNQUOTE = {'0': '\0', 'n': '\n', 'r': '\r'}


def is_ctcp(message):
    """ Check if message follows the CTCP format. """
    return len(message) > 1 and message.startswith(CTCP_DELIMITER) and message.endswith(CTCP_DELIMITER)


def construct_ctcp(*parts):
    """ Construct CTCP message. """
    message = ' '.join(part for part in parts if part is not None)
    message = message.replace(CTCP_ESCAPE_CHAR, CTCP_ESCAPE_CHAR + CTCP_ESCAPE_CHAR)
    message = message.replace('\0', CTCP_ESCAPE_CHAR + '0')
    message = message.replace('\n', CTCP_ESCAPE_CHAR + 'n')
    message = message.replace('\r', CTCP_ESCAPE_CHAR + 'r')
    return CTCP_DELIMITER + message + CTCP_DELIMITER


def parse_ctcp(query):
    """ Strip and de-quote CTCP message. Returns a (type, contents) tuple; contents is None when absent. """
    query = query.strip(CTCP_DELIMITER)
    query = CTCP_QUOTED.sub(lambda match: CTCP_UNQUOTE.get(match.group(1), match.group(1)), query)
    if ' ' in query:
        type, contents = query.split(' ', 1)
        return type.upper(), contents
    return query.upper(), None
