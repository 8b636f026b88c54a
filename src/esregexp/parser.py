"""
Regex pattern parser.

Parses ECMAScript regular expression literals, patterns and flags into an
AST, reporting the first syntax error with its UTF-16 code unit index.
Grammar (simplified):
    Literal      ::= '/' Pattern '/' Flags
    Pattern      ::= Disjunction
    Disjunction  ::= Alternative ('|' Alternative)*
    Alternative  ::= Term*
    Term         ::= Assertion | Atom Quantifier?
    Assertion    ::= '^' | '$' | '\\b' | '\\B' | Lookahead | Lookbehind
    Atom         ::= PatternChar | '.' | CharClass | Group | '\\' AtomEscape
    Quantifier   ::= ('*' | '+' | '?' | '{' n (',' n?)? '}') '?'?
    CharClass    ::= '[' '^'? ClassContents ']'

Under the v flag, ClassContents is a ClassSetExpression:
    ClassSetExpression ::= ClassUnion | ClassIntersection | ClassSubtraction
    ClassUnion         ::= (ClassSetRange | ClassSetOperand)*
    ClassIntersection  ::= ClassSetOperand ('&&' ClassSetOperand)+
    ClassSubtraction   ::= ClassSetOperand ('--' ClassSetOperand)+
    ClassSetOperand    ::= NestedClass | ClassStringDisjunction | ClassSetCharacter

When the grammar is not strict and neither u nor v is set, the Annex B
extensions apply: malformed braces, invalid escapes and quantified
lookaheads are read as literal text instead of being rejected.
"""

import logging
import math
from dataclasses import asdict
from typing import List, Optional, Tuple, Union

from .ast_nodes import (
    Node, Alternative, AnyCharacterSet, Backreference, CapturingGroup, Character,
    CharacterClass, CharacterClassRange, ClassIntersection, ClassStringDisjunction,
    ClassSubtraction, EdgeAssertion, EscapeCharacterSet, ExpressionCharacterClass,
    Flags, Group, LookaroundAssertion, ModifierFlags, Modifiers, Pattern, Quantifier,
    RegExpLiteral, StringAlternative, UnicodePropertyCharacterSet, WordBoundaryAssertion,
)
from .ecma_versions import supports
from .errors import (
    RegExpSyntaxError, RegExpNestingError,
    DUPLICATE_CAPTURE_GROUP_NAME, EMPTY, INCOMPLETE_QUANTIFIER, INVALID_CAPTURE_GROUP_NAME,
    INVALID_CHARACTER_CLASS, INVALID_CHARACTER_IN_CLASS, INVALID_EMPTY_FLAGS, INVALID_ESCAPE,
    INVALID_FLAGS, INVALID_GROUP, INVALID_NAMED_CAPTURE_REFERENCED, INVALID_NAMED_REFERENCE,
    INVALID_PROPERTY_NAME, INVALID_SET_OPERATION, INVALID_UNICODE_ESCAPE,
    LONE_QUANTIFIER_BRACKETS, NEGATED_CLASS_WITH_STRINGS, NOTHING_TO_REPEAT,
    QUANTIFIER_OUT_OF_ORDER, RANGE_OUT_OF_ORDER, TRAILING_BACKSLASH, UNMATCHED_PAREN,
    UNTERMINATED_CLASS, UNTERMINATED_GROUP, UNTERMINATED_REGEXP,
    UNTERMINATED_STRING_DISJUNCTION, duplicated_flag, unexpected_character,
)
from .flags import RegExpFlags, read_flags
from .groups import GroupSpecifiers
from .options import ParserOptions
from .reader import Reader, to_code_units
from .unicode import (
    BACKSPACE,
    combine_surrogate_pair,
    is_class_set_reserved_double_punctuator,
    is_class_set_reserved_punctuator,
    is_class_set_syntax_character,
    is_decimal_digit,
    is_hex_digit,
    is_id_continue,
    is_id_start,
    is_latin_letter,
    is_lead_surrogate,
    is_line_terminator,
    is_octal_digit,
    is_property_name_character,
    is_property_value_character,
    is_syntax_character,
    is_trail_surrogate,
    is_valid_code_point,
    is_valid_lone_unicode_property,
    is_valid_lone_unicode_property_of_strings,
    is_valid_unicode_property,
)

logger = logging.getLogger(__name__)

CONTROL_ESCAPES = {'f': 0x0C, 'n': 0x0A, 'r': 0x0D, 't': 0x09, 'v': 0x0B}
ESCAPE_SET_KINDS = {'d': 'digit', 's': 'space', 'w': 'word'}
MODIFIER_ATTRIBUTES = {'i': 'ignore_case', 'm': 'multiline', 's': 'dot_all'}
# Characters an Annex B term may not start with
EXTENDED_EXCLUDED = frozenset('^$\\.*+?()[|')


def may_contain_strings(node: Node) -> bool:
    """Whether a v-mode class element can match strings of length other than one."""
    if isinstance(node, UnicodePropertyCharacterSet):
        return node.strings
    if isinstance(node, ClassStringDisjunction):
        return any(len(alternative.elements) != 1 for alternative in node.alternatives)
    if isinstance(node, CharacterClass):
        return not node.negate and any(may_contain_strings(e) for e in node.elements)
    if isinstance(node, ExpressionCharacterClass):
        return not node.negate and may_contain_strings(node.expression)
    if isinstance(node, ClassIntersection):
        return may_contain_strings(node.left) and may_contain_strings(node.right)
    if isinstance(node, ClassSubtraction):
        return may_contain_strings(node.left)
    return False


class RegExpParser:
    """Parser for ECMAScript regular expressions."""

    def __init__(self, options: Optional[ParserOptions] = None, **kwargs):
        """
        Create a parser.

        Args:
            options: A ParserOptions instance
            **kwargs: ParserOptions fields, used when ``options`` is not given
        """
        if options is None:
            options = ParserOptions(**kwargs)
        elif kwargs:
            raise TypeError("Pass either options or keyword options, not both")
        self.options = options
        self.ecma_version = options.ecma_version
        self.strict = options.strict
        self._reader = Reader()
        self._kind = "literal"
        self._source_start = 0
        self._source_end = 0
        self._reset_state()

    def _reset_state(self) -> None:
        self._unicode_mode = False
        self._unicode_sets_mode = False
        self._n_flag = False
        self._last_assertion_is_quantifiable = False
        self._num_capturing_parens = 0
        self._group_count = 0
        self._depth = 0
        self._named_backreferences: List[Backreference] = []
        self._groups = GroupSpecifiers(supports(self.ecma_version, "duplicate_named_groups"))

    # Public entry points

    def parse_literal(self, source: str, start: int = 0, end: Optional[int] = None) -> RegExpLiteral:
        """
        Parse a regular expression literal such as ``/ab+c/gi``.

        Args:
            source: Text containing the literal
            start: Code unit offset where the literal starts
            end: Code unit offset where the literal ends (default: end of text)

        Returns:
            The RegExpLiteral node; all spans are offsets into ``source``
        """
        units = to_code_units(source)
        end = len(units) if end is None else end
        self._begin("literal", units, start, end)
        logger.debug("parsing literal %r (ecma_version=%d, strict=%s)",
                     source[start:end], self.ecma_version, self.strict)

        reader = self._reader
        if reader.eat('/') and self._eat_regexp_body() and reader.eat('/'):
            return self._finish_literal(start, end, reader.index)
        if start >= end:
            self._raise(EMPTY)
        self._raise(unexpected_character(reader.current))

    def parse_source(self, source: str, flags: str = "") -> RegExpLiteral:
        """
        Parse a pattern and flag string as the literal ``/source/flags``.

        Unlike parse_literal, ``source`` may contain unescaped '/' and line
        terminators, as with ``new RegExp(source, flags)``.  Spans and error
        indexes are offsets into the combined literal text.
        """
        literal = f"/{source}/{flags}"
        units = to_code_units(literal)
        self._begin("literal", units, 0, len(units))
        logger.debug("parsing %r with flags %r (ecma_version=%d, strict=%s)",
                     source, flags, self.ecma_version, self.strict)
        return self._finish_literal(0, len(units), len(to_code_units(source)) + 2)

    def _finish_literal(self, start: int, end: int, flags_start: int) -> RegExpLiteral:
        flags_node, flags = self._parse_flags_internal(flags_start, end)
        pattern = self._parse_pattern_internal(start + 1, flags_start - 1, flags)
        return RegExpLiteral(start=start, end=end, raw=self._reader.text(start, end),
                             pattern=pattern, flags=flags_node)

    def parse_pattern(
        self,
        source: str,
        flags: Union[str, RegExpFlags, None] = None,
        start: int = 0,
        end: Optional[int] = None,
    ) -> Pattern:
        """
        Parse a pattern body such as ``ab+c``.

        Args:
            source: Text containing the pattern
            flags: Flag string or RegExpFlags selecting the grammar mode
            start: Code unit offset where the pattern starts
            end: Code unit offset where the pattern ends (default: end of text)

        Returns:
            The Pattern node; all spans are offsets into ``source``
        """
        if flags is None:
            flags = RegExpFlags()
        elif isinstance(flags, str):
            flags = read_flags(flags, self.ecma_version)
        units = to_code_units(source)
        end = len(units) if end is None else end
        self._begin("pattern", units, start, end)
        logger.debug("parsing pattern %r (ecma_version=%d, strict=%s)",
                     source[start:end], self.ecma_version, self.strict)
        return self._parse_pattern_internal(start, end, flags)

    def parse_flags(self, source: str, start: int = 0, end: Optional[int] = None) -> Flags:
        """Parse a flag string such as ``gimsuy`` into a Flags node."""
        units = to_code_units(source)
        end = len(units) if end is None else end
        self._begin("flags", units, start, end)
        flags_node, _ = self._parse_flags_internal(start, end)
        return flags_node

    # Setup and diagnostics

    def _begin(self, kind: str, units: List[int], start: int, end: int) -> None:
        self._kind = kind
        self._source_start = start
        self._source_end = end
        self._reset_state()
        self._reader.reset(units, start, end, False)

    def _error_source(self) -> Optional[str]:
        """The text quoted in error messages for the current parse."""
        text = self._reader.text(self._source_start, self._source_end)
        if self._kind == "literal":
            return text or None
        if self._kind == "pattern":
            mode = ""
            if self._unicode_mode and not self._unicode_sets_mode:
                mode = "u"
            elif self._unicode_sets_mode:
                mode = "v"
            return f"/{text}/{mode}"
        return None

    def _raise(self, message: str, index: Optional[int] = None):
        if index is None:
            index = self._reader.index
        raise RegExpSyntaxError(message, index, self._error_source())

    def _node(self, cls, start: int, **fields):
        """Build ``cls`` spanning from ``start`` to the current position."""
        end = self._reader.index
        return cls(start=start, end=end, raw=self._reader.text(start, end), **fields)

    def _enter_nesting(self, start: int) -> None:
        self._depth += 1
        if self._depth > self.options.max_depth:
            raise RegExpNestingError(start, self._error_source())

    def _leave_nesting(self) -> None:
        self._depth -= 1

    # Literal body and flags

    def _eat_regexp_body(self) -> bool:
        """Skip to the closing '/' of a literal; False when the body is empty."""
        reader = self._reader
        start = reader.index
        in_class = False
        escaped = False
        while True:
            ch = reader.current
            if ch is None or is_line_terminator(ch):
                self._raise(UNTERMINATED_CLASS if in_class else UNTERMINATED_REGEXP)
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '[':
                in_class = True
            elif ch == ']':
                in_class = False
            elif (ch == '/' and not in_class) or (ch == '*' and reader.index == start):
                break
            reader.advance()
        return reader.index != start

    def _parse_flags_internal(self, start: int, end: int) -> Tuple[Flags, RegExpFlags]:
        text = self._reader.text(start, end)
        flags = read_flags(text, self.ecma_version, offset=start, context=self._error_source())
        node = Flags(start=start, end=end, raw=text, **asdict(flags))
        return node, flags

    # Pattern

    def _parse_pattern_internal(self, start: int, end: int, flags: RegExpFlags) -> Pattern:
        if flags.unicode and flags.unicode_sets:
            # flags given as RegExpFlags bypass read_flags
            self._raise(INVALID_FLAGS, start)
        self._unicode_mode = flags.unicode_mode
        self._unicode_sets_mode = flags.unicode_sets
        self._n_flag = (
            (flags.unicode and supports(self.ecma_version, "named_groups"))
            or flags.unicode_sets
            or (self.strict and supports(self.ecma_version, "strict_named_references"))
        )
        self._reader.reset(self._reader.units, start, end, self._unicode_mode)
        try:
            pattern = self._consume_pattern()

            if (not self._n_flag and supports(self.ecma_version, "named_groups")
                    and not self._groups.is_empty()):
                # \k is only a reference when the pattern has named groups
                logger.debug("named groups found, reparsing with \\k references")
                self._n_flag = True
                self._reader.rewind(start)
                pattern = self._consume_pattern()
        except RecursionError:
            # max_depth is above what the interpreter stack allows
            logger.debug("recursion limit reached at depth %d", self._depth)
            raise RegExpNestingError(self._reader.index, self._error_source()) from None
        return pattern

    def _consume_pattern(self) -> Pattern:
        reader = self._reader
        start = reader.index
        self._num_capturing_parens = self._count_capturing_parens()
        self._groups.clear()
        self._group_count = 0
        self._depth = 0
        self._named_backreferences = []

        alternatives = self._parse_disjunction()

        ch = reader.current
        if ch is not None:
            if ch == ')':
                self._raise(UNMATCHED_PAREN)
            if ch == '\\':
                self._raise(TRAILING_BACKSLASH)
            if ch in (']', '}'):
                self._raise(LONE_QUANTIFIER_BRACKETS)
            self._raise(unexpected_character(ch))

        for reference in self._named_backreferences:
            if not self._groups.has_in_pattern(reference.ref):
                self._raise(INVALID_NAMED_CAPTURE_REFERENCED)
            reference.resolved = self._groups.indexes(reference.ref)

        return self._node(Pattern, start, alternatives=alternatives)

    def _count_capturing_parens(self) -> int:
        """Count capturing groups ahead of parsing so \\N can refer forward."""
        reader = self._reader
        start = reader.index
        in_class = False
        escaped = False
        count = 0
        while reader.current is not None:
            ch = reader.current
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '[':
                in_class = True
            elif ch == ']':
                in_class = False
            elif ch == '(' and not in_class and (
                reader.next != '?'
                or (reader.next2 == '<' and reader.next3 not in ('=', '!'))
            ):
                count += 1
            reader.advance()
        reader.rewind(start)
        return count

    def _parse_disjunction(self) -> List[Alternative]:
        """Parse alternation (a|b|c)."""
        reader = self._reader
        self._groups.enter_disjunction()
        alternatives = [self._parse_alternative(0)]
        while reader.eat('|'):
            alternatives.append(self._parse_alternative(len(alternatives)))

        if self._eat_quantifier(no_error=True) is not None:
            self._raise(NOTHING_TO_REPEAT)
        if reader.eat('{'):
            self._raise(LONE_QUANTIFIER_BRACKETS)
        self._groups.leave_disjunction()
        return alternatives

    def _parse_nested_disjunction(self, start: int) -> List[Alternative]:
        self._enter_nesting(start)
        alternatives = self._parse_disjunction()
        self._leave_nesting()
        return alternatives

    def _parse_alternative(self, index: int) -> Alternative:
        """Parse sequence of terms."""
        start = self._reader.index
        self._groups.enter_alternative(index)
        elements: List[Node] = []
        while self._reader.current is not None:
            term = self._parse_term()
            if term is None:
                break
            elements.append(term)
        return self._node(Alternative, start, elements=elements)

    def _parse_term(self) -> Optional[Node]:
        """Parse a single term (assertion or atom with optional quantifier)."""
        if self._unicode_mode or self.strict:
            assertion = self._try_parse_assertion()
            if assertion is not None:
                return assertion
            atom = self._parse_atom()
            if atom is None:
                return None
            return self._try_parse_quantifier(atom)

        assertion = self._try_parse_assertion()
        if assertion is not None:
            if self._last_assertion_is_quantifiable:
                return self._try_parse_quantifier(assertion)
            return assertion
        atom = self._parse_extended_atom()
        if atom is None:
            return None
        return self._try_parse_quantifier(atom)

    def _try_parse_assertion(self) -> Optional[Node]:
        """Try to parse an assertion (^, $, \\b, \\B, lookaround)."""
        reader = self._reader
        start = reader.index
        self._last_assertion_is_quantifiable = False

        if reader.eat('^'):
            return self._node(EdgeAssertion, start, kind="start")
        if reader.eat('$'):
            return self._node(EdgeAssertion, start, kind="end")
        if reader.eat2('\\', 'B'):
            return self._node(WordBoundaryAssertion, start, negate=True)
        if reader.eat2('\\', 'b'):
            return self._node(WordBoundaryAssertion, start, negate=False)

        if reader.eat2('(', '?'):
            lookbehind = supports(self.ecma_version, "lookbehind") and reader.eat('<')
            negate = False
            found = reader.eat('=')
            if not found and reader.eat('!'):
                found = negate = True
            if found:
                kind = "lookbehind" if lookbehind else "lookahead"
                alternatives = self._parse_nested_disjunction(start)
                if not reader.eat(')'):
                    self._raise(UNTERMINATED_GROUP)
                self._last_assertion_is_quantifiable = not lookbehind and not self.strict
                return self._node(LookaroundAssertion, start, kind=kind, negate=negate,
                                  alternatives=alternatives)
            reader.rewind(start)
        return None

    # Quantifiers

    def _try_parse_quantifier(self, atom: Node) -> Node:
        """Wrap ``atom`` in a Quantifier if one follows it."""
        quantifier = self._eat_quantifier()
        if quantifier is None:
            return atom
        min_count, max_count, greedy = quantifier
        return self._node(Quantifier, atom.start, min=min_count, max=max_count,
                          greedy=greedy, element=atom)

    def _eat_quantifier(self, no_error: bool = False) -> Optional[Tuple[int, float, bool]]:
        reader = self._reader
        if reader.eat('*'):
            min_count, max_count = 0, math.inf
        elif reader.eat('+'):
            min_count, max_count = 1, math.inf
        elif reader.eat('?'):
            min_count, max_count = 0, 1
        else:
            braces = self._eat_braced_quantifier(no_error)
            if braces is None:
                return None
            min_count, max_count = braces

        # Check for lazy modifier
        greedy = not reader.eat('?')
        return min_count, max_count, greedy

    def _eat_braced_quantifier(self, no_error: bool) -> Optional[Tuple[int, float]]:
        """Parse {n}, {n,}, or {n,m} quantifier."""
        reader = self._reader
        start = reader.index
        if reader.eat('{'):
            min_count = self._eat_decimal_digits()
            if min_count is not None:
                max_count = min_count
                if reader.eat(','):
                    max_digits = self._eat_decimal_digits()
                    max_count = math.inf if max_digits is None else max_digits
                if reader.eat('}'):
                    if not no_error and max_count < min_count:
                        self._raise(QUANTIFIER_OUT_OF_ORDER)
                    return min_count, max_count
            if not no_error and (self._unicode_mode or self.strict):
                self._raise(INCOMPLETE_QUANTIFIER)
            reader.rewind(start)
        return None

    # Atoms

    def _parse_atom(self) -> Optional[Node]:
        """Parse an atom (char, dot, class, group, escape)."""
        reader = self._reader
        ch = reader.current
        if ch is None:
            return None

        if ch == '.':
            return self._parse_dot()
        if ch == '\\':
            return self._parse_reverse_solidus_atom_escape()
        if ch == '[':
            return self._parse_char_class()
        if ch == '(':
            return self._parse_group()

        if not is_syntax_character(ch):
            start = reader.index
            reader.advance()
            return self._node(Character, start, value=ord(ch))
        return None

    def _parse_extended_atom(self) -> Optional[Node]:
        """Parse an atom with the Annex B extensions."""
        reader = self._reader
        ch = reader.current
        if ch is None:
            return None

        if ch == '.':
            return self._parse_dot()
        if ch == '\\':
            atom = self._parse_reverse_solidus_atom_escape()
            if atom is not None:
                return atom
            if reader.next == 'c':
                # \c without a control letter: the backslash stands for itself
                start = reader.index
                reader.advance()
                return self._node(Character, start, value=ord('\\'))
            return None
        if ch == '[':
            return self._parse_char_class()
        if ch == '(':
            return self._parse_group()
        if ch == '{' and self._eat_braced_quantifier(no_error=True) is not None:
            self._raise(NOTHING_TO_REPEAT)

        if ch not in EXTENDED_EXCLUDED:
            start = reader.index
            reader.advance()
            return self._node(Character, start, value=ord(ch))
        return None

    def _parse_dot(self) -> AnyCharacterSet:
        start = self._reader.index
        self._reader.advance()
        return self._node(AnyCharacterSet, start)

    # Groups

    def _parse_group(self) -> Node:
        """Parse group (...), (?:...), (?<name>...) or (?ims-ims:...)."""
        reader = self._reader
        start = reader.index
        reader.advance()  # consume '('

        if reader.current != '?':
            return self._parse_capturing_group_body(start, None)

        if reader.next == ':':
            reader.advance()
            reader.advance()
            return self._parse_group_body(start, None)

        if reader.next == '<' and supports(self.ecma_version, "named_groups"):
            reader.advance()  # consume '?'
            name = self._eat_group_name()
            if self._groups.has_in_scope(name):
                self._raise(DUPLICATE_CAPTURE_GROUP_NAME)
            return self._parse_capturing_group_body(start, name)

        if supports(self.ecma_version, "modifiers"):
            reader.advance()  # consume '?'
            modifiers = self._parse_modifiers()
            if modifiers is not None and reader.eat(':'):
                return self._parse_group_body(start, modifiers)

        self._raise(INVALID_GROUP, start + 1)

    def _parse_group_body(self, start: int, modifiers: Optional[Modifiers]) -> Group:
        alternatives = self._parse_nested_disjunction(start)
        if not self._reader.eat(')'):
            self._raise(UNTERMINATED_GROUP)
        return self._node(Group, start, alternatives=alternatives, modifiers=modifiers)

    def _parse_capturing_group_body(self, start: int, name: Optional[str]) -> CapturingGroup:
        self._group_count += 1
        index = self._group_count
        if name is not None:
            self._groups.add_to_scope(name, index)
        alternatives = self._parse_nested_disjunction(start)
        if not self._reader.eat(')'):
            self._raise(UNTERMINATED_GROUP)
        return self._node(CapturingGroup, start, index=index, name=name,
                          alternatives=alternatives)

    def _parse_modifiers(self) -> Optional[Modifiers]:
        """Parse the ``ims-ims`` part of a modifiers group."""
        reader = self._reader
        start = reader.index
        add = self._eat_modifier_flags()
        has_add = add.end > add.start
        has_hyphen = reader.eat('-')
        if not has_add and not has_hyphen:
            return None

        remove = None
        if has_hyphen:
            remove = self._eat_modifier_flags()
            if remove.end == remove.start and not has_add and reader.current == ':':
                self._raise(INVALID_EMPTY_FLAGS)
            for name, attribute in MODIFIER_ATTRIBUTES.items():
                if getattr(add, attribute) and getattr(remove, attribute):
                    self._raise(duplicated_flag(name))
        return self._node(Modifiers, start, add=add, remove=remove)

    def _eat_modifier_flags(self) -> ModifierFlags:
        """Read a run of i/m/s; the node is empty when none follow."""
        reader = self._reader
        start = reader.index
        values = {}
        while reader.current is not None and reader.current in MODIFIER_ATTRIBUTES:
            attribute = MODIFIER_ATTRIBUTES[reader.current]
            if attribute in values:
                self._raise(duplicated_flag(reader.current))
            values[attribute] = True
            reader.advance()
        return self._node(ModifierFlags, start, **values)

    def _eat_group_name(self) -> Optional[str]:
        """Parse ``<name>``; None when no '<' follows."""
        reader = self._reader
        if reader.eat('<'):
            name = self._eat_identifier_name()
            if name is not None and reader.eat('>'):
                return name
            self._raise(INVALID_CAPTURE_GROUP_NAME)
        return None

    def _eat_identifier_name(self) -> Optional[str]:
        cp = self._eat_identifier_char(is_id_start)
        if cp is None:
            return None
        name = [chr(cp)]
        while True:
            cp = self._eat_identifier_char(is_id_continue)
            if cp is None:
                return ''.join(name)
            name.append(chr(cp))

    def _eat_identifier_char(self, predicate) -> Optional[int]:
        """Read one identifier character, possibly written as a \\u escape."""
        reader = self._reader
        start = reader.index
        ch = reader.current
        if ch is None:
            return None
        force_u = not self._unicode_mode and supports(self.ecma_version, "unicode_group_names")
        reader.advance()
        cp = ord(ch)

        escaped = None
        if ch == '\\':
            escaped = self._eat_unicode_escape(force_u)
        if escaped is not None:
            cp = escaped
        elif force_u and is_lead_surrogate(cp) and reader.current is not None \
                and is_trail_surrogate(ord(reader.current)):
            cp = combine_surrogate_pair(cp, ord(reader.current))
            reader.advance()

        if predicate(cp):
            return cp
        reader.rewind(start)
        return None

    # Escapes

    def _parse_reverse_solidus_atom_escape(self) -> Optional[Node]:
        reader = self._reader
        start = reader.index
        if reader.eat('\\'):
            atom = self._parse_atom_escape(start)
            if atom is not None:
                return atom
            reader.rewind(start)
        return None

    def _parse_atom_escape(self, start: int) -> Optional[Node]:
        """Parse what follows a backslash outside a class."""
        atom = self._parse_backreference(start)
        if atom is None:
            atom = self._parse_character_class_escape(start)
        if atom is None:
            atom = self._parse_character_escape(start)
        if atom is None and self._n_flag:
            atom = self._parse_k_group_name(start)
        if atom is None and (self.strict or self._unicode_mode):
            self._raise(INVALID_ESCAPE)
        return atom

    def _parse_backreference(self, start: int) -> Optional[Backreference]:
        reader = self._reader
        digits_start = reader.index
        number = self._eat_decimal_escape()
        if number is not None:
            if number <= self._num_capturing_parens:
                return self._node(Backreference, start, ref=number, resolved=[number])
            if self.strict or self._unicode_mode:
                self._raise(INVALID_ESCAPE)
            reader.rewind(digits_start)
        return None

    def _parse_k_group_name(self, start: int) -> Optional[Backreference]:
        reader = self._reader
        if reader.eat('k'):
            name = self._eat_group_name()
            if name is not None:
                reference = self._node(Backreference, start, ref=name)
                self._named_backreferences.append(reference)
                return reference
            self._raise(INVALID_NAMED_REFERENCE)
        return None

    def _parse_character_class_escape(self, start: int) -> Optional[Node]:
        """Parse \\d \\D \\s \\S \\w \\W and \\p{...} \\P{...}; ``start`` is the backslash."""
        reader = self._reader
        ch = reader.current
        if ch is None:
            return None

        kind = ESCAPE_SET_KINDS.get(ch.lower())
        if kind is not None:
            reader.advance()
            return self._node(EscapeCharacterSet, start, kind=kind, negate=ch.isupper())

        if (ch in ('p', 'P') and self._unicode_mode
                and supports(self.ecma_version, "property_escapes")):
            negate = ch == 'P'
            reader.advance()
            if reader.eat('{'):
                property_ = self._eat_property_value_expression()
                if property_ is not None and reader.eat('}'):
                    key, value, strings = property_
                    if negate and strings:
                        self._raise(INVALID_PROPERTY_NAME)
                    return self._node(UnicodePropertyCharacterSet, start, key=key, value=value,
                                      negate=negate, strings=strings)
            self._raise(INVALID_PROPERTY_NAME)
        return None

    def _eat_property_value_expression(self) -> Optional[Tuple[str, Optional[str], bool]]:
        """Parse the inside of \\p{...} into (key, value, strings)."""
        reader = self._reader
        version = self.ecma_version
        start = reader.index

        # UnicodePropertyName=UnicodePropertyValue
        name = self._eat_property_chars(is_property_name_character)
        if name is not None and reader.eat('='):
            value = self._eat_property_chars(is_property_value_character)
            if value is not None:
                if is_valid_unicode_property(version, name, value):
                    return name, value, False
                self._raise(INVALID_PROPERTY_NAME)
        reader.rewind(start)

        # LoneUnicodePropertyNameOrValue
        lone = self._eat_property_chars(is_property_value_character)
        if lone is not None:
            if is_valid_unicode_property(version, "General_Category", lone):
                return "General_Category", lone, False
            if is_valid_lone_unicode_property(version, lone):
                return lone, None, False
            if self._unicode_sets_mode and is_valid_lone_unicode_property_of_strings(version, lone):
                return lone, None, True
            self._raise(INVALID_PROPERTY_NAME)
        return None

    def _eat_property_chars(self, predicate) -> Optional[str]:
        reader = self._reader
        chars = []
        while predicate(reader.current):
            chars.append(reader.current)
            reader.advance()
        return ''.join(chars) or None

    def _parse_character_escape(self, start: int) -> Optional[Character]:
        """Parse a single-character escape; ``start`` is the backslash."""
        value = self._eat_control_escape()
        if value is None:
            value = self._eat_c_control_letter()
        if value is None:
            value = self._eat_zero()
        if value is None:
            value = self._eat_hex_escape()
        if value is None:
            value = self._eat_unicode_escape()
        if value is None and not self.strict and not self._unicode_mode:
            value = self._eat_legacy_octal_escape()
        if value is None:
            value = self._eat_identity_escape()
        if value is None:
            return None
        return self._node(Character, start, value=value)

    def _eat_control_escape(self) -> Optional[int]:
        ch = self._reader.current
        if ch is not None and ch in CONTROL_ESCAPES:
            self._reader.advance()
            return CONTROL_ESCAPES[ch]
        return None

    def _eat_c_control_letter(self) -> Optional[int]:
        reader = self._reader
        start = reader.index
        if reader.eat('c'):
            ch = reader.current
            if is_latin_letter(ch):
                reader.advance()
                return ord(ch) % 0x20
            reader.rewind(start)
        return None

    def _eat_zero(self) -> Optional[int]:
        reader = self._reader
        if reader.current == '0' and not is_decimal_digit(reader.next):
            reader.advance()
            return 0
        return None

    def _eat_hex_escape(self) -> Optional[int]:
        """Parse \\xXX escape."""
        reader = self._reader
        start = reader.index
        if reader.eat('x'):
            value = self._eat_fixed_hex_digits(2)
            if value is not None:
                return value
            if self._unicode_mode or self.strict:
                self._raise(INVALID_ESCAPE)
            reader.rewind(start)
        return None

    def _eat_unicode_escape(self, force_u: bool = False) -> Optional[int]:
        """Parse \\uXXXX, \\uXXXX\\uXXXX or \\u{X...}; the backslash is consumed."""
        reader = self._reader
        start = reader.index
        u_flag = force_u or self._unicode_mode
        if reader.eat('u'):
            value = None
            if u_flag:
                value = self._eat_surrogate_pair_escape()
            if value is None:
                value = self._eat_fixed_hex_digits(4)
            if value is None and u_flag:
                value = self._eat_code_point_escape()
            if value is not None:
                return value
            if self.strict or u_flag:
                self._raise(INVALID_UNICODE_ESCAPE)
            reader.rewind(start)
        return None

    def _eat_surrogate_pair_escape(self) -> Optional[int]:
        reader = self._reader
        start = reader.index
        lead = self._eat_fixed_hex_digits(4)
        if lead is not None:
            if is_lead_surrogate(lead) and reader.eat('\\') and reader.eat('u'):
                trail = self._eat_fixed_hex_digits(4)
                if trail is not None and is_trail_surrogate(trail):
                    return combine_surrogate_pair(lead, trail)
            reader.rewind(start)
        return None

    def _eat_code_point_escape(self) -> Optional[int]:
        reader = self._reader
        start = reader.index
        if reader.eat('{'):
            value = self._eat_hex_digits()
            if value is not None and reader.eat('}') and is_valid_code_point(value):
                return value
        reader.rewind(start)
        return None

    def _eat_legacy_octal_escape(self) -> Optional[int]:
        n1 = self._eat_octal_digit()
        if n1 is None:
            return None
        n2 = self._eat_octal_digit()
        if n2 is None:
            return n1
        if n1 <= 3:
            n3 = self._eat_octal_digit()
            if n3 is not None:
                return n1 * 64 + n2 * 8 + n3
        return n1 * 8 + n2

    def _eat_identity_escape(self) -> Optional[int]:
        ch = self._reader.current
        if self._is_valid_identity_escape(ch):
            self._reader.advance()
            return ord(ch)
        return None

    def _is_valid_identity_escape(self, ch: Optional[str]) -> bool:
        if ch is None:
            return False
        if self._unicode_mode:
            return is_syntax_character(ch) or ch == '/'
        if self.strict:
            return not is_id_continue(ord(ch))
        if self._n_flag:
            return ch not in ('c', 'k')
        return ch != 'c'

    def _eat_decimal_escape(self) -> Optional[int]:
        ch = self._reader.current
        if ch is not None and '1' <= ch <= '9':
            return self._eat_decimal_digits()
        return None

    # Digits

    def _eat_decimal_digits(self) -> Optional[int]:
        reader = self._reader
        digits = ''
        while is_decimal_digit(reader.current):
            digits += reader.current
            reader.advance()
        return int(digits) if digits else None

    def _eat_hex_digits(self) -> Optional[int]:
        reader = self._reader
        digits = ''
        while is_hex_digit(reader.current):
            digits += reader.current
            reader.advance()
        return int(digits, 16) if digits else None

    def _eat_fixed_hex_digits(self, length: int) -> Optional[int]:
        reader = self._reader
        start = reader.index
        digits = ''
        for _ in range(length):
            if not is_hex_digit(reader.current):
                reader.rewind(start)
                return None
            digits += reader.current
            reader.advance()
        return int(digits, 16)

    def _eat_octal_digit(self) -> Optional[int]:
        ch = self._reader.current
        if is_octal_digit(ch):
            self._reader.advance()
            return int(ch)
        return None

    # Character classes

    def _parse_char_class(self, nested: bool = False) -> Node:
        """Parse character class [...]; ``nested`` for a class inside a v-mode class."""
        reader = self._reader
        start = reader.index
        reader.advance()  # consume '['
        self._enter_nesting(start)

        negate = reader.eat('^')
        if self._unicode_sets_mode:
            elements = self._parse_class_set_contents()
        else:
            elements = self._parse_class_ranges()

        if not reader.eat(']'):
            if nested or reader.current is None:
                self._raise(UNTERMINATED_CLASS)
            self._raise(INVALID_CHARACTER_IN_CLASS)
        if negate and any(may_contain_strings(e) for e in elements):
            self._raise(NEGATED_CLASS_WITH_STRINGS)
        self._leave_nesting()

        if (self._unicode_sets_mode and len(elements) == 1
                and isinstance(elements[0], (ClassIntersection, ClassSubtraction))):
            return self._node(ExpressionCharacterClass, start, negate=negate,
                              expression=elements[0])
        return self._node(CharacterClass, start, negate=negate,
                          unicode_sets=self._unicode_sets_mode, elements=elements)

    def _parse_class_ranges(self) -> List[Node]:
        """Parse class contents without the v flag: atoms and a-b ranges."""
        reader = self._reader
        strict = self.strict or self._unicode_mode
        elements: List[Node] = []
        while True:
            range_start = reader.index
            low = self._parse_class_atom()
            if low is None:
                break
            if not reader.eat('-'):
                elements.append(low)
                continue
            dash = self._node(Character, reader.index - 1, value=ord('-'))
            high = self._parse_class_atom()
            if high is None:
                elements.extend([low, dash])
                break
            if not isinstance(low, Character) or not isinstance(high, Character):
                if strict:
                    self._raise(INVALID_CHARACTER_CLASS)
                elements.extend([low, dash, high])
                continue
            if low.value > high.value:
                self._raise(RANGE_OUT_OF_ORDER)
            elements.append(self._node(CharacterClassRange, range_start, min=low, max=high))
        return elements

    def _parse_class_atom(self) -> Optional[Node]:
        reader = self._reader
        start = reader.index
        ch = reader.current
        if ch is not None and ch != '\\' and ch != ']':
            reader.advance()
            return self._node(Character, start, value=ord(ch))

        if reader.eat('\\'):
            atom = self._parse_class_escape(start)
            if atom is not None:
                return atom
            if not self.strict and reader.current == 'c':
                return self._node(Character, start, value=ord('\\'))
            if self.strict or self._unicode_mode:
                self._raise(INVALID_ESCAPE)
            reader.rewind(start)
        return None

    def _parse_class_escape(self, start: int) -> Optional[Node]:
        reader = self._reader
        if reader.eat('b'):
            return self._node(Character, start, value=BACKSPACE)
        if self._unicode_mode and reader.eat('-'):
            return self._node(Character, start, value=ord('-'))

        ch = reader.next
        if (not self.strict and not self._unicode_mode and reader.current == 'c'
                and (is_decimal_digit(ch) or ch == '_')):
            reader.advance()
            reader.advance()
            return self._node(Character, start, value=ord(ch) % 0x20)

        atom = self._parse_character_class_escape(start)
        if atom is not None:
            return atom
        return self._parse_character_escape(start)

    # Character classes with the v flag

    def _parse_class_set_contents(self) -> List[Node]:
        if self._reader.current in (None, "]"):
            # at end of input the enclosing class reports it as unterminated
            return []
        return self._parse_class_set_expression()

    def _parse_class_set_expression(self) -> List[Node]:
        reader = self._reader
        start = reader.index

        first = self._parse_class_set_character()
        if first is not None:
            class_range = self._parse_class_set_range_from_operator(first)
            if class_range is not None:
                elements = [class_range]
                self._parse_class_union_right(elements)
                return elements
            left = first
        else:
            left = self._parse_class_set_operand()
            if left is None:
                ch = reader.current
                if ch == '\\':
                    reader.advance()
                    self._raise(INVALID_ESCAPE)
                if ch == reader.next and is_class_set_reserved_double_punctuator(ch):
                    self._raise(INVALID_SET_OPERATION)
                self._raise(INVALID_CHARACTER_IN_CLASS)

        if reader.eat2('&', '&'):
            while reader.current != '&':
                right = self._parse_class_set_operand()
                if right is None:
                    break
                left = self._node(ClassIntersection, start, left=left, right=right)
                if not reader.eat2('&', '&'):
                    return [left]
            self._raise(INVALID_CHARACTER_IN_CLASS)

        if reader.eat2('-', '-'):
            while True:
                right = self._parse_class_set_operand()
                if right is None:
                    break
                left = self._node(ClassSubtraction, start, left=left, right=right)
                if not reader.eat2('-', '-'):
                    return [left]
            self._raise(INVALID_CHARACTER_IN_CLASS)

        elements = [left]
        self._parse_class_union_right(elements)
        return elements

    def _parse_class_union_right(self, elements: List[Node]) -> None:
        while True:
            char = self._parse_class_set_character()
            if char is not None:
                class_range = self._parse_class_set_range_from_operator(char)
                elements.append(char if class_range is None else class_range)
                continue
            operand = self._parse_class_set_operand()
            if operand is None:
                return
            elements.append(operand)

    def _parse_class_set_range_from_operator(self, low: Character) -> Optional[CharacterClassRange]:
        reader = self._reader
        dash_start = reader.index
        if reader.eat('-'):
            high = self._parse_class_set_character()
            if high is not None:
                if low.value > high.value:
                    self._raise(RANGE_OUT_OF_ORDER)
                return self._node(CharacterClassRange, low.start, min=low, max=high)
            reader.rewind(dash_start)
        return None

    def _parse_class_set_operand(self) -> Optional[Node]:
        operand = self._parse_nested_class()
        if operand is None:
            operand = self._parse_class_string_disjunction()
        if operand is None:
            operand = self._parse_class_set_character()
        return operand

    def _parse_nested_class(self) -> Optional[Node]:
        reader = self._reader
        start = reader.index
        if reader.current == '[':
            return self._parse_char_class(nested=True)
        if reader.eat('\\'):
            operand = self._parse_character_class_escape(start)
            if operand is not None:
                return operand
            reader.rewind(start)
        return None

    def _parse_class_string_disjunction(self) -> Optional[ClassStringDisjunction]:
        """Parse \\q{abc|def}."""
        reader = self._reader
        start = reader.index
        if reader.eat3('\\', 'q', '{'):
            alternatives = [self._parse_class_string()]
            while reader.eat('|'):
                alternatives.append(self._parse_class_string())
            if reader.eat('}'):
                return self._node(ClassStringDisjunction, start, alternatives=alternatives)
            self._raise(UNTERMINATED_STRING_DISJUNCTION)
        return None

    def _parse_class_string(self) -> StringAlternative:
        reader = self._reader
        start = reader.index
        elements = []
        while reader.current is not None:
            char = self._parse_class_set_character()
            if char is None:
                break
            elements.append(char)
        return self._node(StringAlternative, start, elements=elements)

    def _parse_class_set_character(self) -> Optional[Character]:
        """Parse one ClassSetCharacter, escaped or not."""
        reader = self._reader
        start = reader.index
        ch = reader.current
        if ch != reader.next or not is_class_set_reserved_double_punctuator(ch):
            if ch is not None and not is_class_set_syntax_character(ch):
                reader.advance()
                return self._node(Character, start, value=ord(ch))

        if reader.eat('\\'):
            char = self._parse_character_escape(start)
            if char is not None:
                return char
            ch = reader.current
            if is_class_set_reserved_punctuator(ch):
                reader.advance()
                return self._node(Character, start, value=ord(ch))
            if reader.eat('b'):
                return self._node(Character, start, value=BACKSPACE)
            reader.rewind(start)
        return None
