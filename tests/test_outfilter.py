import pytest

from jamtool.outfilter import (
    MAX_DESTINATIONS,
    MAX_RULES,
    FilterError,
    OutputFilter,
    simplify_fname,
)


def _read(path):
    return path.read_text(encoding="utf-8")


def test_simplify_worked_example():
    assert simplify_fname("A\\B\\..\\C.h") == "a/c.h"


def test_simplify_lowers_ascii():
    assert simplify_fname("SRC/Main.CPP") == "src/main.cpp"


@pytest.mark.parametrize(
    "left, right",
    [
        ("a//b", "a/b"),
        ("a\\b", "a/b"),
        ("a/./b", "a/b"),
        ("x/y/../z", "x/z"),
        ("X\\.\\Y", "x/y"),
        ("Dir\\\\Sub\\File.h", "dir/sub/file.h"),
    ],
)
def test_simplify_equivalent_spellings(left, right):
    assert simplify_fname(left) == simplify_fname(right)


@pytest.mark.parametrize("name", ["a/b/c.h", "Inc\\..\\x\\Y.h", "p//q/./r"])
def test_simplify_is_idempotent(name):
    once = simplify_fname(name)
    assert simplify_fname(once) == once


def test_simplify_overflow_returns_none():
    assert simplify_fname("a" * 300) is None


def test_line_written_to_file(tmp_path):
    out = tmp_path / "out.txt"
    with OutputFilter() as filt:
        filt.add(str(out), "^error", "", None)
        filt.prepare()
        assert filt.process_line("error: boom") is True
        assert filt.process_line("warning: fine") is False
    assert _read(out) == "error: boom\n"


def test_not_prepared_consumes_without_writing(tmp_path):
    out = tmp_path / "out.txt"
    filt = OutputFilter()
    filt.add(str(out), "x", "", None)
    assert filt.process_line("xyz") is True
    assert not out.exists()


def test_replacement_groups(tmp_path):
    out = tmp_path / "out.txt"
    name, num = "foo.c", "12"
    with OutputFilter() as filt:
        filt.add(str(out), "^(.*):([0-9]+):", "", "$2 in $1")
        filt.prepare()
        assert filt.process_line(f"{name}:{num}: bad") is True
    assert _read(out) == f"{num} in {name}\n"


def test_replacement_dollar_escape(tmp_path):
    out = tmp_path / "out.txt"
    with OutputFilter() as filt:
        filt.add(str(out), "^(abc)", "", "$$$1")
        filt.prepare()
        filt.process_line("abcdef")
    assert _read(out) == "$abc\n"


def test_replacement_trailing_escape_drops_last_literal(tmp_path):
    out = tmp_path / "out.txt"
    with OutputFilter() as filt:
        filt.add(str(out), "^(abc)", "", "$1 end$$")
        filt.prepare()
        filt.process_line("abc")
    assert _read(out) == "abc\n"


def test_bad_replacement_warns_and_writes_line(tmp_path):
    out = tmp_path / "out.txt"
    with OutputFilter() as filt:
        with pytest.warns(UserWarning, match="bad replace pattern"):
            rule = filt.add(str(out), "x", "", "$x")
        assert rule.replacement is None
        filt.prepare()
        filt.process_line("xyz")
    assert _read(out) == "xyz\n"


def test_unknown_flag_warns():
    filt = OutputFilter()
    with pytest.warns(UserWarning, match="unknown regexp flag"):
        rule = filt.add("nul", "x", "q", None)
    assert rule.flags == 0


def test_proceed_flag_runs_later_rules(tmp_path):
    out = tmp_path / "out.txt"
    with OutputFilter() as filt:
        filt.add(str(out), "a", "p", "first")
        filt.add(str(out), "a", "", "second")
        filt.prepare()
        assert filt.process_line("a") is True
    assert _read(out) == "first\nsecond\n"


def test_without_proceed_first_rule_wins(tmp_path):
    out = tmp_path / "out.txt"
    with OutputFilter() as filt:
        filt.add(str(out), "a", "", "first")
        filt.add(str(out), "a", "", "second")
        filt.prepare()
        filt.process_line("a")
    assert _read(out) == "first\n"


def test_dependency_names_written_once(tmp_path):
    out = tmp_path / "deps.txt"
    with OutputFilter() as filt:
        rule = filt.add(str(out), "^inc: (.*)", "d1", "$1")
        assert rule.dep_group == 1
        filt.prepare()
        results = [
            filt.process_line(line)
            for line in ("inc: A\\B.h", "inc: a/b.h", "inc: c.h", "other")
        ]
    assert results == [True, True, True, False]
    assert _read(out) == "a/b.h\nc.h\n"


def test_nul_destination_swallows(capsys):
    filt = OutputFilter()
    filt.add("NUL", "secret", "", None)
    filt.prepare()
    assert filt.process_line("secret stuff") is True
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


def test_stdout_destination(capsys):
    filt = OutputFilter()
    filt.add("stdout", "^hello", "", None)
    filt.prepare()
    filt.process_line("hello")
    assert capsys.readouterr().out == "hello\n"


def test_destinations_compared_without_case(tmp_path):
    filt = OutputFilter()
    filt.add(str(tmp_path / "OUT.log"), "a", "", None)
    filt.add(str(tmp_path / "out.log"), "b", "", None)
    assert len(filt.destinations) == 1
    assert {rule.destination for rule in filt.rules} == {0}


def test_too_many_destinations(tmp_path):
    filt = OutputFilter()
    for index in range(MAX_DESTINATIONS):
        filt.add(str(tmp_path / f"f{index}"), "a", "", None)
    with pytest.raises(FilterError):
        filt.add(str(tmp_path / "extra"), "a", "", None)
    assert len(filt.destinations) == MAX_DESTINATIONS


def test_too_many_rules():
    filt = OutputFilter()
    for _ in range(MAX_RULES):
        filt.add("nul", "a", "", None)
    with pytest.raises(FilterError):
        filt.add("nul", "a", "", None)
    assert len(filt.rules) == MAX_RULES


def test_bad_pattern_raises_and_adds_nothing():
    filt = OutputFilter()
    with pytest.raises(FilterError):
        filt.add("nul", "(abc", "", None)
    assert filt.rules == []
    assert filt.destinations == []


def test_close_forgets_everything(tmp_path):
    out = tmp_path / "out.txt"
    filt = OutputFilter()
    filt.add(str(out), "a", "", None)
    filt.prepare()
    filt.process_line("a")
    filt.close()
    assert filt.rules == []
    assert filt.destinations == []
    assert _read(out) == "a\n"