from dataclasses import replace

import pytest

from jamtool.pathsys import PathName
from jamtool.pathunix import path_build, path_parent, path_parse


def test_parse_all_parts():
    path = path_parse("<g>dir/sub/file.c(mem.o)")
    assert path.grist == "<g"
    assert path.dir == "dir/sub"
    assert path.base == "file"
    assert path.suffix == ".c"
    assert path.member == "mem.o"


def test_suffix_is_last_dot_before_member():
    path = path_parse("lib.a(x.o)")
    assert path.base == "lib"
    assert path.suffix == ".a"
    assert path.member == "x.o"


def test_root_slash_is_directory():
    path = path_parse("/file")
    assert path.dir == "/"
    assert path.base == "file"


@pytest.mark.parametrize(
    "name",
    ["file.c", "dir/file.c", "/file", "/a/b/c.tar.gz", "<g>x/y.h", "lib.a(m.o)", "noext", "a/.rc"],
)
@pytest.mark.parametrize("nt", [False, True])
def test_round_trip(name, nt):
    assert path_build(path_parse(name, nt), nt=nt) == name


def test_backslash_only_separates_on_nt():
    plain = path_parse("a\\b.c")
    assert plain.dir == ""
    assert plain.base == "a\\b"
    nt = path_parse("a\\b.c", nt=True)
    assert nt.dir == "a"
    assert nt.base == "b"


def test_nt_build_uses_forward_slash():
    assert path_build(path_parse("a\\b.c", nt=True), nt=True) == "a/b.c"


def test_drive_directory_keeps_slash():
    path = path_parse("D:/x.c", nt=True)
    assert path.dir == "D:/"
    assert path_build(path, nt=True) == "D:/x.c"


def test_dot_root_is_ignored():
    path = replace(path_parse("a/b.c"), root=".")
    assert path_build(path) == "a/b.c"


def test_rooted_dir_ignores_root():
    path = replace(path_parse("/a/b.c"), root="r")
    assert path_build(path) == "/a/b.c"


def test_root_is_prepended_to_relative_name():
    path = replace(path_parse("sub/b.c"), root="top")
    assert path_build(path) == path_build(path_parse("top/sub/b.c"))


def test_grist_gets_brackets():
    assert path_build(PathName(grist="g", base="x")) == "<g>x"


def test_parent_drops_file():
    parent = path_parent(path_parse("a/b.c(m)"))
    assert parent.base == parent.suffix == parent.member == ""
    assert path_build(parent) == "a"