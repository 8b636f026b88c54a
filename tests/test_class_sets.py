"""Tests for character classes under the v flag (set notation)."""

import pytest

from esregexp import RegExpSyntaxError, parse_literal, parse_pattern
from esregexp.ast_nodes import (
    Character, CharacterClass, CharacterClassRange, ClassIntersection,
    ClassStringDisjunction, ClassSubtraction, EscapeCharacterSet,
    ExpressionCharacterClass, UnicodePropertyCharacterSet,
)
from esregexp.parser import may_contain_strings


def first_element(source):
    return parse_literal(source).pattern.alternatives[0].elements[0]


class TestScenarios:
    """Reference error cases for set notation."""

    @pytest.mark.parametrize("source,message,index", [
        (r"/[(]/v", "Invalid character in character class", 2),
        (r"/[&&]/v", "Invalid set operation in character class", 2),
        (r"/[b-a]/v", "Range out of order in character class", 5),
        (r"/[^\q{ab}]/v", "Negated character class may contain strings", 10),
        (r"/[A--\q{abc|def]/v", "Unterminated class string disjunction", 15),
        (r"/\q{a}/v", "Invalid escape", 2),
    ])
    def test_error(self, literal_error, source, message, index):
        """Message and index match the engine."""
        error = literal_error(source)
        assert (error.message, error.index) == (message, index)


class TestUnion:
    """Plain sequences of characters, ranges and operands."""

    def test_characters_and_ranges(self):
        """A union keeps its elements in order."""
        node = first_element("/[a-cx]/v")
        assert isinstance(node, CharacterClass)
        assert node.unicode_sets is True
        class_range, char = node.elements
        assert isinstance(class_range, CharacterClassRange)
        assert (class_range.min.value, class_range.max.value) == (0x61, 0x63)
        assert (class_range.start, class_range.end, class_range.raw) == (2, 5, "a-c")
        assert isinstance(char, Character)

    def test_empty_class(self):
        """[] and [^] are valid."""
        assert first_element("/[]/v").elements == []
        assert first_element("/[^]/v").negate is True

    def test_nested_class(self):
        """A [ inside a class opens a nested class."""
        node = first_element("/[a[bc]]/v")
        char, nested = node.elements
        assert isinstance(nested, CharacterClass)
        assert (nested.start, nested.end, nested.raw) == (3, 7, "[bc]")
        assert [c.value for c in nested.elements] == [0x62, 0x63]

    def test_escape_operands(self):
        """Class escapes are operands."""
        node = first_element(r"/[\d\p{L}]/v")
        digit, prop = node.elements
        assert isinstance(digit, EscapeCharacterSet)
        assert isinstance(prop, UnicodePropertyCharacterSet)

    def test_single_reserved_punctuator(self):
        """A single reserved punctuator is an ordinary character."""
        node = first_element("/[a!b]/v")
        assert [c.value for c in node.elements] == [0x61, 0x21, 0x62]

    def test_escaped_punctuators(self):
        """Reserved punctuators may be escaped; \\b is backspace."""
        node = first_element(r"/[\&\-\b]/v")
        assert [c.value for c in node.elements] == [0x26, 0x2D, 0x08]

    def test_doubled_punctuator_after_character(self, literal_error):
        """A doubled punctuator cannot continue a union."""
        error = literal_error("/[a!!b]/v")
        assert (error.message, error.index) == ("Invalid character in character class", 3)

    @pytest.mark.parametrize("source", ["/[!!]/v", "/[##]/v", "/[~~]/v", "/[..]/v"])
    def test_doubled_punctuator_first(self, literal_error, source):
        """A doubled punctuator where an operand is expected."""
        error = literal_error(source)
        assert (error.message, error.index) == ("Invalid set operation in character class", 2)

    def test_syntax_character(self, literal_error):
        """Unescaped class syntax characters fail."""
        error = literal_error("/[a{]/v")
        assert (error.message, error.index) == ("Invalid character in character class", 3)

    def test_range_with_class_escape(self, literal_error):
        """Ranges need characters on both sides."""
        error = literal_error(r"/[\d-a]/v")
        assert (error.message, error.index) == ("Invalid character in character class", 4)

    def test_escaped_range_out_of_order(self, literal_error):
        """Escaped endpoints are compared by value."""
        error = literal_error(r"/[\x62-\x61]/v")
        assert (error.message, error.index) == ("Range out of order in character class", 11)


class TestOperators:
    """Intersection and subtraction."""

    def test_intersection(self):
        """[a&&b] is an ExpressionCharacterClass."""
        node = first_element("/[a&&b]/v")
        assert isinstance(node, ExpressionCharacterClass)
        assert (node.start, node.end) == (1, 7)
        expression = node.expression
        assert isinstance(expression, ClassIntersection)
        assert (expression.start, expression.end, expression.raw) == (2, 6, "a&&b")
        assert (expression.left.value, expression.right.value) == (0x61, 0x62)

    def test_intersection_is_left_associative(self):
        """a&&b&&c nests to the left."""
        expression = first_element("/[a&&b&&c]/v").expression
        assert isinstance(expression.left, ClassIntersection)
        assert expression.left.raw == "a&&b"
        assert expression.right.value == 0x63
        assert expression.raw == "a&&b&&c"

    def test_subtraction(self):
        """-- builds ClassSubtraction nodes."""
        expression = first_element(r"/[\p{L}--[a-z]--x]/v").expression
        assert isinstance(expression, ClassSubtraction)
        assert isinstance(expression.left, ClassSubtraction)
        assert isinstance(expression.left.left, UnicodePropertyCharacterSet)
        assert isinstance(expression.left.right, CharacterClass)

    def test_negated_expression(self):
        """[^...] sets negate on the expression class."""
        node = first_element("/[^a&&b]/v")
        assert isinstance(node, ExpressionCharacterClass)
        assert node.negate is True

    def test_nested_expressions(self):
        """Nested classes may hold their own operators."""
        node = first_element("/[[a-z]&&[^aeiou]]/v")
        assert isinstance(node.expression.right, CharacterClass)
        assert node.expression.right.negate is True

    @pytest.mark.parametrize("source,index", [
        ("/[ab&&c]/v", 4),
        ("/[a-z&&b]/v", 5),
        ("/[a&&b--c]/v", 6),
        ("/[a--b&&c]/v", 6),
        ("/[a&&&b]/v", 5),
        ("/[a&&]/v", 5),
        ("/[a--]/v", 5),
        (r"/[a&&\z]/v", 5),
        (r"/[a--\B]/v", 5),
    ])
    def test_invalid_operator_use(self, literal_error, source, index):
        """Mixed, dangling or tripled operators."""
        error = literal_error(source)
        assert (error.message, error.index) == ("Invalid character in character class", index)

    def test_operators_without_v(self):
        """With u the same text is a plain class."""
        node = first_element("/[a&&b]/u")
        assert isinstance(node, CharacterClass)
        assert [c.value for c in node.elements] == [0x61, 0x26, 0x26, 0x62]


class TestStringDisjunctions:
    """\\q{...} inside classes."""

    def test_alternatives(self):
        """Each | separates a string alternative."""
        [disjunction] = first_element(r"/[\q{ab|c}]/v").elements
        assert isinstance(disjunction, ClassStringDisjunction)
        assert (disjunction.start, disjunction.end) == (2, 10)
        first, second = disjunction.alternatives
        assert (first.start, first.end, first.raw) == (5, 7, "ab")
        assert [c.value for c in first.elements] == [0x61, 0x62]
        assert (second.start, second.end) == (8, 9)

    def test_empty_alternative(self):
        """\\q{} is an empty string."""
        [disjunction] = first_element(r"/[\q{}]/v").elements
        assert disjunction.alternatives[0].elements == []

    def test_escapes_inside(self):
        """Alternatives may use escaped characters."""
        [disjunction] = first_element(r"/[\q{\||\}}]/v").elements
        assert [a.elements[0].value for a in disjunction.alternatives] == [0x7C, 0x7D]

    def test_unterminated_at_end(self):
        """A missing } at the end of input."""
        with pytest.raises(RegExpSyntaxError) as exc_info:
            parse_pattern(r"[\q{a", "v")
        assert exc_info.value.message == "Unterminated class string disjunction"
        assert exc_info.value.index == 5


class TestNegationWithStrings:
    """Negated classes must not contain strings."""

    @pytest.mark.parametrize("source", [
        r"/[^\q{a|b}]/v",
        r"/[^\q{ab}&&\q{a}]/v",
        r"/[^\p{L}]/v",
        r"/[^[\q{ab}]&&a]/v",
    ])
    def test_valid(self, source):
        """Negation is fine when no strings can match."""
        parse_literal(source)

    @pytest.mark.parametrize("source,index", [
        (r"/[^\p{RGI_Emoji}]/v", 17),
        (r"/[^[\q{ab}]]/v", 12),
        (r"/[^\q{}]/v", 8),
        (r"/[^\q{ab}--\q{a}]/v", 17),
        (r"/[^a\q{bc}]/v", 11),
    ])
    def test_rejected(self, literal_error, source, index):
        """Negation with strings fails after the closing bracket."""
        error = literal_error(source)
        assert (error.message, error.index) == ("Negated character class may contain strings", index)

    def test_inner_class(self, literal_error):
        """A nested negated class is checked on its own."""
        error = literal_error(r"/[a[^\q{ab}]]/v")
        assert (error.message, error.index) == ("Negated character class may contain strings", 12)

    def test_may_contain_strings(self):
        """The check follows union, intersection and subtraction rules."""
        assert may_contain_strings(first_element(r"/[\q{ab}a]/v")) is True
        assert may_contain_strings(first_element(r"/[\q{ab}&&a]/v")) is False
        assert may_contain_strings(first_element(r"/[\q{ab}--a]/v")) is True
        assert may_contain_strings(first_element(r"/[a--\q{ab}]/v")) is False
        assert may_contain_strings(first_element(r"/[\p{RGI_Emoji}]/v")) is True


class TestEscapesInClasses:
    """Escape validity inside v-mode classes."""

    @pytest.mark.parametrize("source,index", [
        (r"/[\B]/v", 3),
        (r"/[\z]/v", 3),
        (r"/[\B&&a]/v", 3),
    ])
    def test_invalid_escape_first_operand(self, literal_error, source, index):
        """An unknown escape as the first operand fails after the backslash."""
        error = literal_error(source)
        assert (error.message, error.index) == ("Invalid escape", index)

    @pytest.mark.parametrize("source,index", [
        (r"/[a\B]/v", 3),
        (r"/[a-c\z]/v", 5),
    ])
    def test_invalid_escape_in_union(self, literal_error, source, index):
        """Later in a union the class stops at the backslash."""
        error = literal_error(source)
        assert (error.message, error.index) == ("Invalid character in character class", index)

    def test_q_outside_class_annex_b(self):
        """Without u or v, \\q is an identity escape."""
        chars = parse_literal(r"/\q{a}/").pattern.alternatives[0].elements
        assert chars[0].value == ord("q")


class TestUnterminated:
    """Missing closing brackets."""

    @pytest.mark.parametrize("source,index", [
        ("[a", 2),
        ("[", 1),
        ("[[a]", 4),
        ("[[a", 3),
        ("[a[", 3),
    ])
    def test_unterminated(self, source, index):
        """Unterminated classes fail at the innermost point reached."""
        with pytest.raises(RegExpSyntaxError) as exc_info:
            parse_pattern(source, "v")
        assert exc_info.value.message == "Unterminated character class"
        assert exc_info.value.index == index

    def test_nested_stopped_by_invalid_character(self):
        """A nested class that meets a stray character is unterminated."""
        with pytest.raises(RegExpSyntaxError) as exc_info:
            parse_pattern("[[a(]]", "v")
        assert exc_info.value.message == "Unterminated character class"
        assert exc_info.value.index == 3

    def test_dangling_operator_at_end(self):
        """An operator with nothing after it is not an unterminated class."""
        for source in ("[a&&", "[a--"):
            with pytest.raises(RegExpSyntaxError) as exc_info:
                parse_pattern(source, "v")
            assert exc_info.value.message == "Invalid character in character class"
            assert exc_info.value.index == 4
