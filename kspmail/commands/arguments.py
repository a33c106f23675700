import argparse
import os
import re
import sys

from kspmail import VERSION
from kspmail.commands.exceptions import EX_USAGE
from kspmail.gpg import DEFAULT_COMMAND


key_id_expr = re.compile(r'^(?:0x)?(?P<key_id>[0-9a-fA-F]{16})$')


def key_id(value):
    """A long key id, with or without a ``0x`` prefix."""

    match = key_id_expr.match(value.strip())
    if match is None:
        raise argparse.ArgumentTypeError(
            u'{0!r} is not a long (16 character) key id'.format(value))
    return match.group('key_id').upper()


class ArgumentParser(argparse.ArgumentParser):
    """Customized so that stdout, stderr and exit are configurable."""

    def __init__(self, *args, **kwargs):
        self._exit = kwargs.pop('exit', sys.exit)
        self._stdout = kwargs.pop('stdout', sys.stdout)
        self._stderr = kwargs.pop('stderr', sys.stderr)
        argparse.ArgumentParser.__init__(self, *args, **kwargs)

    def print_usage(self, file=None):
        if file is None:
            file = self._stdout
        self._print_message(self.format_usage(), file)

    def print_help(self, file=None):
        if file is None:
            file = self._stdout
        self._print_message(self.format_help(), file)

    def _print_message(self, message, file=None):
        if message:
            if file is None:
                file = self._stderr
            file.write(message)

    def exit(self, status=0, message=None):
        if message:
            self._print_message(message, self._stderr)
        self._exit(status)

    def error(self, message):
        self.print_usage(self._stderr)
        args = {'prog': self.prog, 'message': message}
        self.exit(EX_USAGE, '%(prog)s: error: %(message)s\n' % args)


def make_argparser(prog,
                   exit=sys.exit,  # @ReservedAssignment
                   stdout=sys.stdout, stderr=sys.stderr, **environ):
    argparser = ArgumentParser(
        usage='%(prog)s [options] keyid [keyid ...] < keyring',
        description=(
            'Split a keyring signed at a key signing party into one minimal '
            'key per signed user ID and write a mail message for each of '
            'them into the output directory, suitable for `sendmail -t`.'
            ),
        prog=prog,
        exit=exit,
        stdout=stdout,
        stderr=stderr,
        )
    argparser.add_argument(
        'key_ids', metavar='keyid', nargs='+', type=key_id,
        help='Long key id of a key whose signatures should be mailed.'
        )
    argparser.add_argument(
        '--gpg', metavar='command', dest='gpg',
        default=environ.get('KSPMAIL_GPG', DEFAULT_COMMAND),
        help='The GnuPG executable to use. Defaults to \'{0}\'.'.format(
            DEFAULT_COMMAND)
        )
    argparser.add_argument(
        '--homedir', metavar='dir', default=None,
        help='GnuPG home directory to import the keys into for encryption. '
        'If this option is not used a temporary directory is used and '
        'removed afterwards.'
        )
    argparser.add_argument(
        '--output-dir', '-o', metavar='dir', dest='output_dir',
        default=os.curdir,
        help='Write messages into [dir] instead of the current directory.'
        )
    argparser.add_argument(
        '--template', metavar='file', dest='template_file', default=None,
        help='Read the message template from [file]. The fields {uid}, '
        '{key} and {mykey} are replaced.'
        )
    argparser.add_argument(
        '--no-encrypt', action='store_true', dest='no_encrypt',
        help='Do not encrypt messages.'
        )
    argparser.add_argument(
        '--quiet', '-q', action='store_true', dest='quiet',
        help='Do not report progress. Warnings are still shown.'
        )
    argparser.add_argument(
        '--version', action='version',
        version='%(prog)s {0}'.format(VERSION)
        )
    return argparser
