"""
Error types signalled by the PAR crypt tool.

Every condition that must reach the user carries its own exit code so
the command-line driver can report it distinctly from the others.
"""


class ParCryptError(Exception):
    """Base class for conditions the tool reports to the user."""

    exit_code = 1


class MalformedInputError(ParCryptError, ValueError):
    """Input is too short to carry a magic signature."""

    exit_code = 3


class AmbiguousVariantError(ParCryptError):
    """The PAR type could not be determined and nobody was asked."""

    exit_code = 4


class AmbiguousDirectionError(ParCryptError):
    """The operation mode could not be determined and nobody was asked."""

    exit_code = 5


class KeyTableError(ParCryptError):
    """A key table is missing, unreadable or has the wrong size."""

    exit_code = 6
