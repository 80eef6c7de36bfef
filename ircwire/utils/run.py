## run.py
# Run client.
from . import _args


def main():
    client = _args.client_from_args('ircwire', description='ircwire IRC library.')
    client.run()


if __name__ == '__main__':
    main()
