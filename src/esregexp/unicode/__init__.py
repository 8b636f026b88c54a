"""Character predicates used by the regular expression grammar.

Characters are handled as single-character strings.  A lone surrogate is a
valid one-character Python string, so code units and code points share one
representation.
"""

import unicodedata
from typing import Optional

from .properties import (
    is_valid_unicode_property,
    is_valid_lone_unicode_property,
    is_valid_lone_unicode_property_of_strings,
)

__all__ = [
    'SYNTAX_CHARACTERS',
    'is_syntax_character',
    'is_line_terminator',
    'is_decimal_digit',
    'is_octal_digit',
    'is_hex_digit',
    'is_latin_letter',
    'is_id_start',
    'is_id_continue',
    'is_lead_surrogate',
    'is_trail_surrogate',
    'combine_surrogate_pair',
    'is_valid_code_point',
    'is_class_set_syntax_character',
    'is_class_set_reserved_double_punctuator',
    'is_class_set_reserved_punctuator',
    'is_property_name_character',
    'is_property_value_character',
    'is_valid_unicode_property',
    'is_valid_lone_unicode_property',
    'is_valid_lone_unicode_property_of_strings',
]

BACKSPACE = 0x08
ZWNJ = '\u200c'
ZWJ = '\u200d'

SYNTAX_CHARACTERS = frozenset('^$\\.*+?()[]{}|')
LINE_TERMINATORS = frozenset('\n\r\u2028\u2029')
DECIMAL_DIGITS = frozenset('0123456789')
OCTAL_DIGITS = frozenset('01234567')
HEX_DIGITS = frozenset('0123456789abcdefABCDEF')
LATIN_LETTERS = frozenset('abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ')

# ClassSetSyntaxCharacter
CLASS_SET_SYNTAX_CHARACTERS = frozenset('()[]{}/-\\|')
# ClassSetReservedDoublePunctuator, one character of the doubled pair
CLASS_SET_RESERVED_DOUBLE_PUNCTUATORS = frozenset('&!#$%*+,.:;<=>?@^`~')
# ClassSetReservedPunctuator, may follow a backslash inside a v-mode class
CLASS_SET_RESERVED_PUNCTUATORS = frozenset('&-!#%,:;<=>@`~')

# ID_Start and ID_Continue are built from general categories plus the
# Other_ID_Start / Other_ID_Continue lists of PropList.txt, minus Pattern_Syntax.
ID_START_CATEGORIES = frozenset(['Lu', 'Ll', 'Lt', 'Lm', 'Lo', 'Nl'])
ID_CONTINUE_CATEGORIES = ID_START_CATEGORIES | frozenset(['Mn', 'Mc', 'Nd', 'Pc'])
OTHER_ID_START = frozenset([0x1885, 0x1886, 0x2118, 0x212E, 0x309B, 0x309C])
OTHER_ID_CONTINUE = frozenset(
    [0x00B7, 0x0387, 0x19DA, 0x200C, 0x200D, 0x30FB, 0xFF65] + list(range(0x1369, 0x1372))
)
# Pattern_Syntax characters whose general category would otherwise qualify
ID_PATTERN_SYNTAX = frozenset([0x2E2F])


def is_syntax_character(ch: Optional[str]) -> bool:
    return ch in SYNTAX_CHARACTERS


def is_line_terminator(ch: Optional[str]) -> bool:
    return ch in LINE_TERMINATORS


def is_decimal_digit(ch: Optional[str]) -> bool:
    return ch in DECIMAL_DIGITS


def is_octal_digit(ch: Optional[str]) -> bool:
    return ch in OCTAL_DIGITS


def is_hex_digit(ch: Optional[str]) -> bool:
    return ch in HEX_DIGITS


def is_latin_letter(ch: Optional[str]) -> bool:
    return ch in LATIN_LETTERS


def is_id_start(cp: int) -> bool:
    """ID_Start plus ``$`` and ``_`` (RegExpIdentifierStart)."""
    if not is_valid_code_point(cp) or is_lead_surrogate(cp) or is_trail_surrogate(cp):
        return False
    if cp in (0x24, 0x5F):
        return True
    if cp in ID_PATTERN_SYNTAX:
        return False
    return cp in OTHER_ID_START or unicodedata.category(chr(cp)) in ID_START_CATEGORIES


def is_id_continue(cp: int) -> bool:
    """ID_Continue plus ``$``, ZWNJ and ZWJ (RegExpIdentifierPart)."""
    if not is_valid_code_point(cp) or is_lead_surrogate(cp) or is_trail_surrogate(cp):
        return False
    ch = chr(cp)
    if ch in ('$', ZWNJ, ZWJ):
        return True
    if cp in ID_PATTERN_SYNTAX:
        return False
    return (cp in OTHER_ID_START or cp in OTHER_ID_CONTINUE
            or unicodedata.category(ch) in ID_CONTINUE_CATEGORIES)


def is_lead_surrogate(cp: int) -> bool:
    return 0xD800 <= cp <= 0xDBFF


def is_trail_surrogate(cp: int) -> bool:
    return 0xDC00 <= cp <= 0xDFFF


def combine_surrogate_pair(lead: int, trail: int) -> int:
    return (lead - 0xD800) * 0x400 + (trail - 0xDC00) + 0x10000


def is_valid_code_point(cp: int) -> bool:
    return 0 <= cp <= 0x10FFFF


def is_class_set_syntax_character(ch: Optional[str]) -> bool:
    return ch in CLASS_SET_SYNTAX_CHARACTERS


def is_class_set_reserved_double_punctuator(ch: Optional[str]) -> bool:
    return ch in CLASS_SET_RESERVED_DOUBLE_PUNCTUATORS


def is_class_set_reserved_punctuator(ch: Optional[str]) -> bool:
    return ch in CLASS_SET_RESERVED_PUNCTUATORS


def is_property_name_character(ch: Optional[str]) -> bool:
    return ch in LATIN_LETTERS or ch == '_'


def is_property_value_character(ch: Optional[str]) -> bool:
    return is_property_name_character(ch) or ch in DECIMAL_DIGITS
