from typing import Optional


class SDPError(Exception):
    """
    Base class for every error raised by :mod:`sdpjingle`.
    """


class InvalidValueError(SDPError, ValueError):
    """
    A field or primitive received a value outside its allowed range.
    """


class SDPParseError(SDPError):
    """
    A line of text could not be parsed. The offending text is available as
    :attr:`line`.
    """

    def __init__(self, message: str, line: Optional[str] = None) -> None:
        super().__init__(message)
        self.line = line


class SemanticError(SDPError):
    """
    The input is well-formed but violates a cross-field invariant, for
    instance a media block without any connection.
    """


class StanzaError(SDPError):
    """
    A Jingle stanza could not be decoded.
    """
