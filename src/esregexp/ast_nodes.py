"""AST node types for parsed regular expressions.

Every node records its span as UTF-16 code unit offsets (``start``/``end``)
into the parsed source, and ``raw``, the source text of that span.
"""

import math
from dataclasses import dataclass, field, fields
from typing import List, Optional, Union


@dataclass
class Node:
    """Base class for all AST nodes."""
    start: int
    end: int
    raw: str

    def to_dict(self) -> dict:
        """Convert node to dictionary for testing/serialization."""
        result = {"type": self.__class__.__name__}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Node):
                result[f.name] = value.to_dict()
            elif isinstance(value, list):
                result[f.name] = [
                    v.to_dict() if isinstance(v, Node) else v
                    for v in value
                ]
            elif isinstance(value, float) and math.isinf(value):
                result[f.name] = "$$Infinity"
            else:
                result[f.name] = value
        return result


# Characters and character sets

@dataclass
class Character(Node):
    """A single character, literal or escaped: a, \\n, \\u{1F600}."""
    value: int


@dataclass
class AnyCharacterSet(Node):
    """The dot: ."""
    kind: str = "any"


@dataclass
class EscapeCharacterSet(Node):
    """Character class escape: \\d, \\D, \\s, \\S, \\w, \\W."""
    kind: str = "digit"  # 'digit', 'space' or 'word'
    negate: bool = False


@dataclass
class UnicodePropertyCharacterSet(Node):
    """Property escape: \\p{Script=Greek}, \\P{L}, \\p{RGI_Emoji}."""
    key: str = ""
    value: Optional[str] = None
    negate: bool = False
    strings: bool = False  # property of strings (v flag only)
    kind: str = "property"


@dataclass
class CharacterClassRange(Node):
    """Range inside a class: a-z."""
    min: Character = None
    max: Character = None


@dataclass
class StringAlternative(Node):
    """One alternative of a \\q{...} string disjunction."""
    elements: List[Character] = field(default_factory=list)


@dataclass
class ClassStringDisjunction(Node):
    """String disjunction: \\q{abc|d}."""
    alternatives: List[StringAlternative] = field(default_factory=list)


@dataclass
class CharacterClass(Node):
    """Character class: [a-z], [^\\d], [a[bc]] (v flag)."""
    negate: bool = False
    unicode_sets: bool = False
    elements: List[Node] = field(default_factory=list)


@dataclass
class ClassIntersection(Node):
    """Intersection inside a v-mode class: [a&&b]."""
    left: Node = None
    right: Node = None


@dataclass
class ClassSubtraction(Node):
    """Subtraction inside a v-mode class: [a--b]."""
    left: Node = None
    right: Node = None


@dataclass
class ExpressionCharacterClass(Node):
    """v-mode class whose contents are a single intersection or subtraction."""
    negate: bool = False
    expression: Union[ClassIntersection, ClassSubtraction] = None


# Assertions

@dataclass
class EdgeAssertion(Node):
    """Input boundary: ^ or $."""
    kind: str = "start"  # 'start' or 'end'


@dataclass
class WordBoundaryAssertion(Node):
    """Word boundary: \\b or \\B."""
    negate: bool = False
    kind: str = "word"


@dataclass
class LookaroundAssertion(Node):
    """Lookahead (?=...) (?!...) or lookbehind (?<=...) (?<!...)."""
    kind: str = "lookahead"  # 'lookahead' or 'lookbehind'
    negate: bool = False
    alternatives: List["Alternative"] = field(default_factory=list)


# Groups and references

@dataclass
class ModifierFlags(Node):
    """Flags added or removed by a modifiers group."""
    ignore_case: bool = False
    multiline: bool = False
    dot_all: bool = False


@dataclass
class Modifiers(Node):
    """The ims-ims part of (?ims-ims:...)."""
    add: ModifierFlags = None
    remove: Optional[ModifierFlags] = None


@dataclass
class Group(Node):
    """Non-capturing group (?:...), optionally with modifiers."""
    alternatives: List["Alternative"] = field(default_factory=list)
    modifiers: Optional[Modifiers] = None


@dataclass
class CapturingGroup(Node):
    """Capturing group (...) or (?<name>...)."""
    index: int = 0
    name: Optional[str] = None
    alternatives: List["Alternative"] = field(default_factory=list)


@dataclass
class Backreference(Node):
    """Backreference \\1 or \\k<name>.

    ``resolved`` lists the indexes of the capturing groups the reference can
    point to; more than one only for duplicate names in separate alternatives.
    """
    ref: Union[int, str] = 0
    resolved: List[int] = field(default_factory=list)


@dataclass
class Quantifier(Node):
    """Quantified element: a*, a+?, a{2,3}. ``max`` is math.inf when unbounded."""
    min: int = 0
    max: float = math.inf
    greedy: bool = True
    element: Node = None


# Structure

@dataclass
class Alternative(Node):
    """Sequence of terms."""
    elements: List[Node] = field(default_factory=list)


@dataclass
class Pattern(Node):
    """Pattern body: a disjunction of alternatives."""
    alternatives: List[Alternative] = field(default_factory=list)


@dataclass
class Flags(Node):
    """Flags of a literal."""
    has_indices: bool = False
    global_: bool = False
    ignore_case: bool = False
    multiline: bool = False
    dot_all: bool = False
    unicode: bool = False
    unicode_sets: bool = False
    sticky: bool = False


@dataclass
class RegExpLiteral(Node):
    """A whole literal: /pattern/flags."""
    pattern: Pattern = None
    flags: Flags = None


# Union type for the elements of an alternative
Element = Union[Character, AnyCharacterSet, EscapeCharacterSet, UnicodePropertyCharacterSet,
                CharacterClass, ExpressionCharacterClass, EdgeAssertion, WordBoundaryAssertion,
                LookaroundAssertion, Group, CapturingGroup, Backreference, Quantifier]
