import os

from jamtool.timestamp import TimestampCache


def test_existing_file_has_its_mtime(tmp_path):
    path = tmp_path / "a.txt"
    path.write_text("x", encoding="utf-8")
    cache = TimestampCache()
    assert cache.timestamp(str(path)) == os.stat(path).st_mtime


def test_missing_file_is_zero(tmp_path):
    assert TimestampCache().timestamp(str(tmp_path / "absent.c")) == 0


def test_directory_is_scanned_once(tmp_path):
    first = tmp_path / "a.txt"
    first.write_text("x", encoding="utf-8")
    cache = TimestampCache()
    assert cache.timestamp(str(first)) > 0

    later = tmp_path / "b.txt"
    later.write_text("y", encoding="utf-8")
    assert cache.timestamp(str(later)) == 0

    cache.clear()
    assert cache.timestamp(str(later)) == os.stat(later).st_mtime


def test_injected_scanner_and_timer():
    calls = []

    def dirscan(name):
        calls.append(name)
        return [("src/a.c", False, 0), ("src/b.c", True, 42.0)]

    def file_time(name):
        return 7.0 if name == "src/a.c" else None

    cache = TimestampCache(dirscan=dirscan, file_time=file_time)
    assert cache.timestamp("src/a.c") == 7.0
    assert cache.timestamp("src/b.c") == 42.0
    assert cache.timestamp("src/c.c") == 0
    assert calls == ["src"]


def test_spotted_file_without_time_is_zero():
    cache = TimestampCache(
        dirscan=lambda name: [("gone.c", False, 0)],
        file_time=lambda name: None,
    )
    assert cache.timestamp("gone.c") == 0


def test_archive_member_scans_archive():
    scanned = []

    def archscan(name):
        scanned.append(name)
        return [("lib/libx.a(foo.o)", True, 5.0)]

    cache = TimestampCache(dirscan=lambda name: [], archscan=archscan)
    assert cache.timestamp("lib/libx.a(foo.o)") == 5.0
    assert cache.timestamp("lib/libx.a(bar.o)") == 0
    assert scanned == ["lib/libx.a"]


def test_downshift_lowers_names():
    seen = []

    def dirscan(name):
        seen.append(name)
        return [("SRC/A.C", True, 3.0)]

    cache = TimestampCache(dirscan=dirscan, downshift=True)
    assert cache.timestamp("Src/A.c") == 3.0
    assert seen == ["src"]


def test_spotted_file_is_timed_once():
    timed = []

    def file_time(name):
        timed.append(name)
        return 9.0

    cache = TimestampCache(
        dirscan=lambda name: [("obj/x.o", False, 0)],
        file_time=file_time,
    )
    assert cache.timestamp("obj/x.o") == 9.0
    assert cache.timestamp("obj/x.o") == 9.0
    assert timed == ["obj/x.o"]