"""Tests for character classes without the v flag."""

import pytest

from esregexp import RegExpSyntaxError, parse_literal, parse_pattern
from esregexp.ast_nodes import (
    Character, CharacterClass, CharacterClassRange, EscapeCharacterSet,
    UnicodePropertyCharacterSet,
)


def class_elements(source, **options):
    node = parse_literal(source, **options).pattern.alternatives[0].elements[0]
    assert isinstance(node, CharacterClass)
    return node.elements


class TestClassContents:
    """Atoms and ranges."""

    def test_characters(self):
        """Plain characters in order."""
        node = parse_literal("/[abc]/").pattern.alternatives[0].elements[0]
        assert node.unicode_sets is False
        assert node.negate is False
        assert [c.value for c in node.elements] == [0x61, 0x62, 0x63]
        assert (node.start, node.end, node.raw) == (1, 6, "[abc]")

    def test_negated_range(self):
        """[^a-z] is a negated class with one range."""
        node = parse_literal("/[^a-z]/").pattern.alternatives[0].elements[0]
        assert node.negate is True
        [class_range] = node.elements
        assert isinstance(class_range, CharacterClassRange)
        assert (class_range.start, class_range.end) == (3, 6)

    def test_dash_at_edges(self):
        """A leading or trailing - is a character."""
        assert [c.value for c in class_elements("/[a-]/")] == [0x61, 0x2D]
        assert [c.value for c in class_elements("/[-a]/")] == [0x2D, 0x61]

    def test_open_bracket_is_literal(self):
        """Without v a [ inside a class is an ordinary character."""
        assert [c.value for c in class_elements("/[[a]/")] == [0x5B, 0x61]

    def test_range_out_of_order(self, literal_error):
        """z-a fails after the range."""
        error = literal_error("/[z-a]/")
        assert (error.message, error.index) == ("Range out of order in character class", 5)

    def test_escape_in_range_annex_b(self):
        """Annex B reads \\d-z as three elements."""
        escape, dash, z = class_elements(r"/[\d-z]/")
        assert isinstance(escape, EscapeCharacterSet)
        assert (dash.value, dash.start, dash.end) == (0x2D, 4, 5)
        assert z.value == 0x7A

    @pytest.mark.parametrize("options", [{"strict": True}, {}])
    def test_escape_in_range_rejected(self, literal_error, options):
        """Strict and unicode modes reject a class escape as a range end."""
        flags = "" if options else "u"
        error = literal_error(r"/[\d-z]/" + flags, **options)
        assert (error.message, error.index) == ("Invalid character class", 6)

    def test_surrogates_without_unicode(self, literal_error):
        """Without u an astral range compares surrogate halves."""
        error = literal_error("/[\U0001F600-\U0001F602]/")
        assert (error.message, error.index) == ("Range out of order in character class", 6)

    def test_astral_range_unicode(self):
        """With u astral ranges compare code points."""
        [class_range] = class_elements("/[\U0001F600-\U0001F602]/u")
        assert (class_range.min.value, class_range.max.value) == (0x1F600, 0x1F602)
        assert (class_range.start, class_range.end) == (2, 7)

    def test_code_point_escape_range(self):
        """\\u{...} endpoints in unicode mode."""
        [class_range] = class_elements(r"/[\u{41}-\u{5A}]/u")
        assert (class_range.min.value, class_range.max.value) == (0x41, 0x5A)


class TestClassEscapes:
    """Escapes that are specific to classes."""

    def test_backspace(self):
        """\\b is U+0008 inside a class."""
        [char] = class_elements(r"/[\b]/")
        assert char.value == 0x08

    def test_escaped_dash(self):
        """\\- is allowed in unicode mode."""
        [char] = class_elements(r"/[\-]/u")
        assert char.value == 0x2D

    def test_control_digit_annex_b(self):
        """Annex B allows \\c with a digit or underscore in classes."""
        assert [c.value for c in class_elements(r"/[\c1\c_]/")] == [0x11, 0x1F]

    def test_backslash_c_fallback(self):
        """A bare \\c in a class is a backslash then c."""
        backslash, c = class_elements(r"/[\c]/")
        assert (backslash.value, backslash.start, backslash.end) == (0x5C, 2, 3)
        assert c.value == ord("c")

    def test_octal_in_class(self):
        """\\1 in a class is an octal escape, never a backreference."""
        [char] = class_elements(r"/[\1]/")
        assert isinstance(char, Character)
        assert char.value == 1

    def test_property_in_class(self):
        """\\p{...} is allowed inside a unicode class."""
        [prop] = class_elements(r"/[\p{Lu}]/u")
        assert isinstance(prop, UnicodePropertyCharacterSet)
        assert prop.value == "Lu"

    def test_invalid_escape_unicode(self, literal_error):
        """Unknown escapes fail after the backslash in unicode mode."""
        error = literal_error(r"/[\z]/u")
        assert (error.message, error.index) == ("Invalid escape", 3)

    def test_invalid_escape_strict(self, literal_error):
        """Strict mode rejects identity escapes of word characters."""
        error = literal_error(r"/[\z]/", strict=True)
        assert error.message == "Invalid escape"


class TestUnterminatedClasses:
    """Missing closing brackets."""

    def test_end_of_pattern(self):
        """A class open at the end of the pattern."""
        with pytest.raises(RegExpSyntaxError) as exc_info:
            parse_pattern("a[bc")
        assert exc_info.value.message == "Unterminated character class"
        assert exc_info.value.index == 4

    def test_end_of_literal(self, literal_error):
        """A literal whose body ends inside a class."""
        error = literal_error("/[bc/")
        assert (error.message, error.index) == ("Unterminated character class", 5)

    def test_unicode_pattern(self):
        """The same holds in unicode mode."""
        with pytest.raises(RegExpSyntaxError) as exc_info:
            parse_pattern("[", "u")
        assert exc_info.value.index == 1
