import re

import pytest

from jamtool.regcompile import RegexpError, compile_regexp
from jamtool.regmatch import Match, Regexp, search


AGREEING_CASES = [
    ("abc", "xxabcxx"),
    ("a.c", "zzabc"),
    ("^ab", "abab"),
    ("ab$", "abab"),
    ("[0-9]+", "abc123def"),
    ("[^a-z]+", "abc123def"),
    ("(a|b)*c", "xxabbc"),
    ("x(ab)+y", "zxababy"),
    ("colou?r", "the color"),
    ("a*b", "caaab"),
    ("(foo|bar)baz", "foobarbaz"),
    (r"a\.b", "xa.b"),
    ("(a)(b)(c)", "abc"),
    (r"([a-z]+)\.([a-z]+)", "see file.cpp now"),
    ("(a)|b", "b"),
    ("abc", "abd"),
    ("^b", "ab"),
    ("[a-c]*d", "xyz"),
]


@pytest.mark.parametrize("pattern, text", AGREEING_CASES)
def test_agrees_with_standard_engine(pattern, text):
    expected = re.search(pattern, text)
    found = Regexp(pattern).search(text)
    if expected is None:
        assert found is None
        return_groups = None
    else:
        assert found is not None
        assert found.span(0) == expected.span(0)
        return_groups = expected.re.groups
        for index in range(1, return_groups + 1):
            assert found.group(index) == expected.group(index)
    assert (return_groups is None) == (expected is None)


def test_group_zero_matches_span():
    found = Regexp("[0-9]+").search("ab 42 cd")
    start, end = found.span(0)
    assert found.group(0) == "ab 42 cd"[start:end]
    assert found.group() == "42"


def test_last_iteration_is_captured():
    found = Regexp("(a|b)*c").search("abc")
    assert found.group(1) == "b"


def test_unused_groups_are_none():
    found = Regexp("(a)").search("a")
    assert found.group(1) == "a"
    assert found.group(5) is None
    assert found.span(9) is None


def test_group_out_of_range():
    found = Regexp("a").search("a")
    with pytest.raises(IndexError):
        found.group(10)
    with pytest.raises(IndexError):
        found.span(-1)


def test_word_anchors():
    pattern = Regexp(r"\<foo\>")
    assert pattern.search("a foo b").group() == "foo"
    assert pattern.search("afoo b") is None
    assert pattern.search("a foobar") is None
    assert pattern.search("foo").span() == (0, 3)


def test_text_ends_at_nul():
    assert Regexp("def").search("abc\0def") is None
    assert Regexp("c$").search("abc\0def").group() == "c"


def test_must_string_prefilter():
    pattern = Regexp("a*bcd")
    assert pattern.search("xxbcd").group() == "bcd"
    assert pattern.search("aaabc") is None


def test_anchored_only_tries_start():
    pattern = Regexp("^x")
    assert pattern.search("yx") is None
    assert pattern.search("xy").span() == (0, 1)


def test_empty_pattern_matches_at_start():
    found = Regexp("").search("abc")
    assert found.span() == (0, 0)


def test_module_search_same_as_method():
    program = compile_regexp("(o+)")
    direct = search(program, "foo bar")
    via = Regexp("(o+)").search("foo bar")
    assert direct == via
    assert direct.group(1) == "oo"


def test_match_is_value_object():
    found = Regexp("b").search("abc")
    assert found == Match("abc", found.spans)
    assert found.string == "abc"


def test_invalid_pattern_raises():
    with pytest.raises(RegexpError):
        Regexp("(ab")
    with pytest.raises(RegexpError):
        Regexp("*a")


def test_null_arguments_raise():
    with pytest.raises(RegexpError):
        search(None, "abc")
    with pytest.raises(RegexpError):
        search(compile_regexp("a"), None)


def test_alternation_with_newline():
    pattern = Regexp("cat\ndog")
    assert pattern.search("hotdog").group() == "dog"
    assert pattern.search("bird") is None