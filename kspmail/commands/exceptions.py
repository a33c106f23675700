EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_UNAVAILABLE = 69


class FatalException(Exception):
    """Processing cannot go on. ``exit_code`` is returned to the shell."""

    def __init__(self, message, exit_code=EX_DATAERR):
        Exception.__init__(self, message)
        self.exit_code = exit_code
