"""Regular expression syntax errors."""

from typing import Optional


class RegExpSyntaxError(ValueError):
    """Syntax error raised while validating a regular expression.

    ``message`` is the short canonical reason (for example
    ``"Unterminated group"``) and ``index`` the UTF-16 code unit offset at
    which it was detected.  ``str(error)`` gives the full engine-style text.
    """

    def __init__(self, message: str, index: int, source: Optional[str] = None):
        self.message = message
        self.index = index
        self.source = source
        if source:
            formatted_message = f"Invalid regular expression: {source}: {message}"
        else:
            formatted_message = f"Invalid regular expression: {message}"
        super().__init__(formatted_message)

    def __eq__(self, other):
        if not isinstance(other, RegExpSyntaxError):
            return NotImplemented
        return (self.message, self.index) == (other.message, other.index)

    def __hash__(self):
        return hash((self.message, self.index))

    def __repr__(self):
        return f"{self.__class__.__name__}({self.message!r}, index={self.index})"


class RegExpNestingError(RegExpSyntaxError):
    """Raised when groups or classes nest deeper than the configured ceiling."""

    def __init__(self, index: int, source: Optional[str] = None):
        super().__init__(NESTED_TOO_DEEPLY, index, source)


# Message catalogue

INVALID_CHARACTER_IN_CLASS = "Invalid character in character class"
INVALID_SET_OPERATION = "Invalid set operation in character class"
UNTERMINATED_CLASS = "Unterminated character class"
UNTERMINATED_STRING_DISJUNCTION = "Unterminated class string disjunction"
NEGATED_CLASS_WITH_STRINGS = "Negated character class may contain strings"
RANGE_OUT_OF_ORDER = "Range out of order in character class"
INVALID_CHARACTER_CLASS = "Invalid character class"
INVALID_ESCAPE = "Invalid escape"
INVALID_UNICODE_ESCAPE = "Invalid unicode escape"
INVALID_PROPERTY_NAME = "Invalid property name"
INVALID_GROUP = "Invalid group"
INVALID_CAPTURE_GROUP_NAME = "Invalid capture group name"
DUPLICATE_CAPTURE_GROUP_NAME = "Duplicate capture group name"
INVALID_NAMED_REFERENCE = "Invalid named reference"
INVALID_NAMED_CAPTURE_REFERENCED = "Invalid named capture referenced"
UNTERMINATED_GROUP = "Unterminated group"
UNMATCHED_PAREN = "Unmatched ')'"
NOTHING_TO_REPEAT = "Nothing to repeat"
LONE_QUANTIFIER_BRACKETS = "Lone quantifier brackets"
INCOMPLETE_QUANTIFIER = "Incomplete quantifier"
QUANTIFIER_OUT_OF_ORDER = "numbers out of order in {} quantifier"
TRAILING_BACKSLASH = "\\ at end of pattern"
UNTERMINATED_REGEXP = "Unterminated regular expression"
EMPTY = "Empty"
INVALID_FLAGS = "Invalid regular expression flags"
INVALID_EMPTY_FLAGS = "Invalid empty flags"
NESTED_TOO_DEEPLY = "Pattern nested too deeply"


def invalid_flag(flag: str) -> str:
    return f"Invalid flag '{flag}'"


def duplicated_flag(flag: str) -> str:
    return f"Duplicated flag '{flag}'"


def unexpected_character(char: str) -> str:
    return f"Unexpected character '{char}'"
