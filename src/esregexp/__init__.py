"""
esregexp - ECMAScript regular expression parser and validator.

Parses regular expression literals, patterns and flags the way a
JavaScript engine does, across ES5 and ES2015-ES2025, including:
- the u and v (unicode sets) modes
- Annex B (web compatibility) grammar, or strict grammar on request
- named groups, lookbehind, property escapes and modifiers groups
- error messages and UTF-16 code unit indexes matching the engine

Example:
    >>> from esregexp import parse_literal
    >>> parse_literal("/a+/g").pattern.alternatives[0].elements[0].max
    inf
"""

import logging
from typing import Optional

from .ast_nodes import Flags, Pattern, RegExpLiteral
from .ecma_versions import EcmaVersion, LATEST_ECMA_VERSION
from .errors import RegExpNestingError, RegExpSyntaxError
from .flags import RegExpFlags
from .options import ParserOptions
from .parser import RegExpParser
from .visitor import RegExpVisitor

__version__ = '0.1.0'

__all__ = [
    'EcmaVersion',
    'LATEST_ECMA_VERSION',
    'ParserOptions',
    'RegExpFlags',
    'RegExpParser',
    'RegExpSyntaxError',
    'RegExpNestingError',
    'RegExpVisitor',
    'parse',
    'parse_literal',
    'parse_pattern',
    'parse_flags',
    'validate_literal',
    'validate_pattern',
    'validate_flags',
]

logging.getLogger(__name__).addHandler(logging.NullHandler())


def parse_literal(source: str, options: Optional[ParserOptions] = None, **kwargs) -> RegExpLiteral:
    """
    Parse a regular expression literal.

    Args:
        source: The literal, e.g. ``/ab+c/gi``
        options: ParserOptions; alternatively pass ecma_version, strict
            or max_depth as keywords

    Returns:
        The RegExpLiteral AST

    Raises:
        RegExpSyntaxError: if the literal is malformed
    """
    return RegExpParser(options, **kwargs).parse_literal(source)


def parse_pattern(source: str, flags: str = "", options: Optional[ParserOptions] = None,
                  **kwargs) -> Pattern:
    """
    Parse a pattern body under the given flags.

    Pattern spans and errors are offsets into ``source``; errors in
    ``flags`` are offsets into the flag string.
    """
    return RegExpParser(options, **kwargs).parse_pattern(source, flags)


def parse_flags(source: str, options: Optional[ParserOptions] = None, **kwargs) -> Flags:
    """Parse a flag string such as ``"gimsuy"``."""
    return RegExpParser(options, **kwargs).parse_flags(source)


def parse(source: str, flags: str = "", options: Optional[ParserOptions] = None,
          **kwargs) -> RegExpLiteral:
    """
    Parse ``source`` and ``flags`` as the literal ``/source/flags``.

    Convenience for callers holding the two parts of ``new RegExp(source,
    flags)``.  Spans and error indexes are offsets into the literal.
    """
    return RegExpParser(options, **kwargs).parse_source(source, flags)


def validate_literal(source: str, options: Optional[ParserOptions] = None, **kwargs) -> None:
    """Raise RegExpSyntaxError if ``source`` is not a valid literal."""
    parse_literal(source, options, **kwargs)


def validate_pattern(source: str, flags: str = "", options: Optional[ParserOptions] = None,
                     **kwargs) -> None:
    """Raise RegExpSyntaxError if ``source`` is not a valid pattern."""
    parse_pattern(source, flags, options, **kwargs)


def validate_flags(source: str, options: Optional[ParserOptions] = None, **kwargs) -> None:
    """Raise RegExpSyntaxError if ``source`` is not a valid flag string."""
    parse_flags(source, options, **kwargs)
