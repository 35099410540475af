# jamtool

Core pieces of a Jam-style build tool, as a plain Python library with no
dependencies outside the standard library.

## What is in it

- `jamtool.regcompile` – `compile_regexp(pattern)` compiles Jam's small
  regular-expression dialect (`^ $ . [...] [^...] ( ) |` or newline,
  `* + ?`, backslash quoting and the word anchors `\<` and `\>`) into a
  `Program` of `Node`s. Malformed patterns raise `RegexpError`. At most
  nine capture groups are allowed.
- `jamtool.regmatch` – `Regexp(pattern).search(text)` or
  `search(program, text)` find the leftmost match and return a `Match`
  (with `group(n)` and `span(n)`) or `None`.
- `jamtool.outfilter` – `OutputFilter` routes lines of command output to
  files, `stdout`, `stderr` or `nul`. It takes up to 32 rules and 8
  destinations. Rules are added with
  `add(fname, pattern, flags, replacement)`, and flags `p` (keep trying
  later rules) and `dN` (treat group N as a dependency file name, written
  once) are recognised. Replacements use `$N` for group N and `$$` for a
  dollar sign. `prepare()` opens the destinations and `process_line(line)`
  returns whether a rule consumed the line. The filter is a context
  manager that closes the files it opened. `simplify_fname(name)`
  normalises file names (slashes, case, `.` and `..`). A rule that cannot
  be added raises `FilterError`.
- `jamtool.spawn` – `spawn(cmdname, params, output_filter, one_core)` runs
  a command with stdout and stderr merged and returns its exit code. With a
  filter, each line is passed through it and lines it does not consume are
  printed. Without one, the raw output is copied to stdout.
  `split_lines(chunks)` does the line splitting. `ExecStatus` names the
  outcomes `OK`, `FAIL` and `INTR`.
- `jamtool.pathsys` – `PathName`, a file name broken into `grist`, `root`,
  `dir`, `base`, `suffix` and `member`. `parent_dir()` drops the file part.
- `jamtool.pathunix`, `jamtool.pathmac`, `jamtool.pathvms` – each has
  `path_parse`, `path_build` and `path_parent` for UNIX and NT names
  (`nt=True`), classic Mac names and VMS names.
- `jamtool.variables` – `Variables`, the table of list-valued variables.
  It has `get`, `set` (with `VarFlag.SET`, `APPEND` or `DEFAULT`) and
  `swap`. `load_defines(entries, path_split)` loads `NAME=value` entries or
  a mapping such as `os.environ`. Names ending in `PATH` are split at
  `path_split`, and all other values are split at blanks.
- `jamtool.rules` – `Registry` with `bind_rule`, `bind_target`,
  `copy_target`, `touch_target` and `target_list`. It also holds the
  `Rule`, `Target`, `Action`, `Setting` and `ParseNode` records, and the
  enums `RuleFlag`, `TargetFlag`, `Binding`, `Fate` and `Progress`.
  Target-specific settings are handled by `add_settings`, `copy_settings`,
  `push_settings` and `pop_settings`.
- `jamtool.scanner` – `Scanner` turns Jamfile text into `Token`s. Input is
  added with `push_file(name)` (`-` is standard input) or
  `push_lines(name, lines)`. Tokens come from `next_token()` or from
  iterating the scanner up to the next end of file. `set_mode` takes
  `ScanMode.NORMAL`, `STRING` or `PUNCT`. Malformed input raises
  `ScanError`.
- `jamtool.timestamp` – `TimestampCache.timestamp(target)` returns a
  file's modification time, or 0 if the file is missing. Each directory is
  scanned once and the results are cached. `clear()` forgets the cache.
  Directory and archive scanners can be supplied. By default, archives
  list no members.
- `jamtool.search` – `search(target, variables, stamps)` binds a target
  along `LOCATE` or `SEARCH` and returns `(file name, time)`.

## Installing

    pip install .

## Example

    from jamtool.regmatch import Regexp
    from jamtool.pathunix import path_parse, path_build

    m = Regexp(r"^([a-z]+)\.c$").search("main.c")
    print(m.group(1))            # main

    parts = path_parse("<grist>src/main.c(member.o)", False)
    print(path_build(parts, False, False))   # <grist>src/main.c(member.o)

Filtering command output:

    from jamtool.outfilter import OutputFilter

    with OutputFilter() as flt:
        flt.add("stdout", "^warning", "", "W: $0")
        flt.prepare()
        flt.process_line("warning: unused variable")   # prints "W: warning"

## What it does not do

The package provides building blocks only. It has no command-line program,
no parser or interpreter for the Jamfile language beyond the tokenizer, no
variable expansion, and no dependency analysis or update engine that would
decide what to rebuild and run the actions.

## Running the tests

    pip install .[test]
    pytest