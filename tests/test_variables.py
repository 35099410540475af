import pytest

from jamtool.variables import VarFlag, Variables


def test_unset_variable_is_empty():
    table = Variables()
    assert table.get("NOPE") == []


def test_set_replaces_value():
    table = Variables()
    table.set("X", ["a", "b"])
    table.set("X", ["c"], VarFlag.SET)
    assert table.get("X") == ["c"]


def test_append_extends_value():
    table = Variables()
    table.set("X", ["a"])
    table.set("X", ["b", "c"], VarFlag.APPEND)
    assert table.get("X") == ["a", "b", "c"]


def test_default_only_when_unset():
    table = Variables()
    table.set("X", ["first"], VarFlag.DEFAULT)
    table.set("X", ["second"], VarFlag.DEFAULT)
    assert table.get("X") == ["first"]


def test_default_applies_when_value_empty():
    table = Variables()
    table.set("X", [])
    table.set("X", ["filled"], VarFlag.DEFAULT)
    assert table.get("X") == ["filled"]


def test_get_returns_copy():
    table = Variables()
    table.set("X", ["a"])
    table.get("X").append("b")
    assert table.get("X") == ["a"]


def test_swap_returns_old_and_round_trips():
    table = Variables()
    table.set("X", ["global"])
    old = table.swap("X", ["local"])
    assert old == ["global"]
    assert table.get("X") == ["local"]
    assert table.swap("X", old) == ["local"]
    assert table.get("X") == ["global"]


def test_swap_of_unset_returns_empty():
    table = Variables()
    assert table.swap("NEW", ["v"]) == []
    assert "NEW" in table


def test_load_defines_splits_at_blanks():
    table = Variables()
    table.load_defines(["CFLAGS=-O2 -g"])
    assert table.get("CFLAGS") == ["-O2", "-g"]


@pytest.mark.parametrize("name", ["PATH", "LIBPath", "mypath"])
def test_load_defines_splits_paths(name):
    table = Variables()
    table.load_defines([f"{name}=/bin:/usr/bin"], path_split=":")
    assert table.get(name) == ["/bin", "/usr/bin"]


def test_load_defines_keeps_empty_pieces():
    table = Variables()
    table.load_defines(["X=a  b"])
    assert table.get("X") == ["a", "", "b"]


def test_load_defines_skips_windows_os_and_bare_entries():
    table = Variables()
    table.load_defines(["OS=Windows_NT", "JUSTNAME"])
    assert "OS" not in table
    assert "JUSTNAME" not in table


def test_load_defines_accepts_mapping():
    table = Variables()
    table.load_defines({"HOME": "/home/user"})
    assert table.get("HOME") == ["/home/user"]


def test_value_with_equals_sign_kept():
    table = Variables()
    table.load_defines(["X=a=b"])
    assert table.get("X") == ["a=b"]