## _args.py
# Common argument parsing code.
import argparse
import logging
import ircwire


def client_from_args(name, description, default_nick='Bot', cls=ircwire.Client):
    # Parse some arguments.
    parser = argparse.ArgumentParser(name, description=description, add_help=False,
        epilog='This program is part of {package}.'.format(package=ircwire.__name__))

    meta = parser.add_argument_group('Meta')
    meta.add_argument('-h', '--help', action='help', help='What you are reading right now.')
    meta.add_argument('-v', '--version', action='version', version='{package}/%(prog)s {ver}'.format(package=ircwire.__name__, ver=ircwire.__version__), help='Dump version number.')
    meta.add_argument('-V', '--verbose', help='Be verbose in warnings and errors.', action='store_true', default=False)
    meta.add_argument('-d', '--debug', help='Show debug output, including every line sent and received.', action='store_true', default=False)

    conn = parser.add_argument_group('Connection')
    conn.add_argument('server', help='The server to connect to.', metavar='SERVER')
    conn.add_argument('-p', '--port', help='The port to use. (default: 6667)', type=int, default=ircwire.protocol.DEFAULT_PORT)
    conn.add_argument('-e', '--encoding', help='Connection encoding. (default: UTF-8)', default='utf-8', metavar='ENCODING')

    init = parser.add_argument_group('Initialization')
    init.add_argument('-n', '--nickname', help='Nickname. (default: {})'.format(default_nick), default=default_nick, metavar='NICK')
    init.add_argument('-u', '--username', help='Username. (default: derived from nickname)', metavar='USER')
    init.add_argument('-r', '--realname', help='Realname (GECOS). (default: derived from nickname)', metavar='REAL')
    init.add_argument('--ctcp-version', help='Reply to CTCP VERSION queries. (default: library name and version)', dest='ctcp_version', metavar='VERSION')

    args = parser.parse_args()

    # Set log level.
    if args.debug:
        log_level = logging.DEBUG
    elif args.verbose:
        log_level = logging.INFO
    else:
        log_level = logging.ERROR

    logging.basicConfig(level=log_level)

    # Setup client.
    return cls(nickname=args.nickname, username=args.username, realname=args.realname, version=args.ctcp_version,
        hostname=args.server, port=args.port, encoding=args.encoding, debug=args.debug)
