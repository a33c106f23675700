import functools
import io
import os
import sys
import warnings

from kspmail import NAME
from kspmail.commands.arguments import make_argparser
from kspmail.commands.exceptions import EX_DATAERR
from kspmail.commands.exceptions import EX_NOINPUT
from kspmail.commands.exceptions import EX_UNAVAILABLE
from kspmail.commands.exceptions import FatalException
from kspmail import armor
from kspmail.exceptions import GnuPGError
from kspmail.exceptions import InvalidTemplate
from kspmail.exceptions import KspMailError
from kspmail.exceptions import KspMailWarning
from kspmail.exceptions import SignerKeyUnavailable
from kspmail.gpg import GnuPG
from kspmail.mail import DEFAULT_TEMPLATE
from kspmail.mail import MailWriter
from kspmail.mail import check_template
from kspmail.mail import read_template
from kspmail.shortcuts import mail_keyring


def show_warning(stream, message, category, filename, lineno, file=None,
                 line=None):
    stream.write(u'WARNING: {0}\n'.format(message))


def read_input(stdin):
    if hasattr(stdin, 'buffer'):
        return stdin.buffer.read()
    data = stdin.read()
    if not isinstance(data, bytes):
        data = data.encode('utf-8', 'surrogateescape')
    return data


class Command(object):

    def __init__(self, key_ids, gpg, homedir, output_dir, template_file,
                 no_encrypt, quiet, stderr, gnupg_class=GnuPG,
                 notifier_class=MailWriter):
        self.key_ids = key_ids
        self.gpg = gpg
        self.homedir = homedir
        self.output_dir = output_dir
        self.template = DEFAULT_TEMPLATE
        if template_file is not None:
            try:
                self.template = read_template(template_file)
            except (OSError, UnicodeError) as e:
                raise FatalException(
                    u'Cannot read template {0}: {1}'.format(template_file, e),
                    EX_NOINPUT)
            try:
                check_template(self.template)
            except InvalidTemplate as e:
                raise FatalException(
                    u'Bad template {0}: {1}'.format(template_file, e),
                    EX_DATAERR)
        self.encrypt = not no_encrypt
        self.stderr = stderr
        if quiet:
            self.err_stream = io.StringIO()
        else:
            self.err_stream = stderr
        self.gnupg_class = gnupg_class
        self.notifier_class = notifier_class

    def import_signer_keys(self, gnupg):
        try:
            found = gnupg.import_signer_keys(self.key_ids)
        except GnuPGError as e:
            found = False
            reason = str(e)
        else:
            reason = u'not in your keyring'
        if not found:
            warnings.warn(
                u'Could not export signer keys {0}, messages will not be '
                u'encrypted to them: {1}'.format(
                    u', '.join(self.key_ids), reason),
                SignerKeyUnavailable)

    def run(self, data):
        try:
            data = armor.dearmor(data)
            with self.gnupg_class(self.gpg, self.homedir) as gnupg:
                encryptor = None
                if self.encrypt:
                    gnupg.import_keys(data)
                    self.import_signer_keys(gnupg)
                    self.err_stream.write(u'    imported into gpg\n')
                    encryptor = gnupg
                notifier = self.notifier_class(
                    self.output_dir, self.template, encryptor)
                return mail_keyring(data, self.key_ids, gnupg, notifier,
                                    err_stream=self.err_stream)
        except GnuPGError as e:
            raise FatalException(str(e), EX_UNAVAILABLE)
        except KspMailError as e:
            raise FatalException(str(e), EX_DATAERR)


def main(argv=None,
         environ=None,
         prog=None,
         exit=sys.exit,  # @ReservedAssignment
         stdin=sys.stdin,
         stdout=sys.stdout,
         stderr=sys.stderr,
         command_class=Command,
         argparser_factory=make_argparser,
         ):
    if argv is None:
        if prog is None:
            prog = os.path.basename(sys.argv[0])
        argv = sys.argv[1:]
    if environ is None:
        environ = os.environ
    if prog is None:
        prog = NAME

    argparser = argparser_factory(
        prog=prog, exit=exit, stdout=stdout, stderr=stderr, **environ)
    args = argparser.parse_args(argv)

    if hasattr(stdin, 'isatty') and stdin.isatty():
        stderr.write(u'Expecting GPG keyring on stdin...\n')

    exit_code = 0
    with warnings.catch_warnings():
        warnings.simplefilter('always', KspMailWarning)
        warnings.showwarning = functools.partial(show_warning, stderr)
        try:
            command = command_class(stderr=stderr, **vars(args))
            command.run(read_input(stdin))
        except FatalException as e:
            stderr.write(u'{0}: {1}\n'.format(prog, e))
            exit_code = e.exit_code
    return exit(exit_code)
