"""Rules, targets, actions and target-specific settings.

These hold what interpreting the jam files accumulates: the rules and
actions defined, the targets named and the variables to set while a
target's actions run.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import Any

from jamtool.variables import VarFlag, Variables


@dataclass
class ParseNode:
    """A node of a parse tree, evaluated by calling ``func``."""

    func: Callable[..., Any] | None = None
    left: ParseNode | None = None
    right: ParseNode | None = None
    third: ParseNode | None = None
    string: str | None = None
    string1: str | None = None
    num: int = 0


class RuleFlag(IntFlag):
    """Modifiers on actions."""

    NONE = 0
    UPDATED = 0x01  # $(>) is updated sources only
    TOGETHER = 0x02  # combine actions on single target
    IGNORE = 0x04  # ignore return status of executes
    QUIETLY = 0x08  # don't mention it unless verbose
    PIECEMEAL = 0x10  # split exec so each $(>) is small
    EXISTING = 0x20  # $(>) is pre-existing sources only
    MAXLINE = 0x40  # command specific maxline


class TargetFlag(IntFlag):
    """Status information on a target."""

    NONE = 0
    TEMP = 0x01  # TEMPORARY applied
    NOCARE = 0x02  # NOCARE applied
    NOTFILE = 0x04  # NOTFILE applied
    TOUCHED = 0x08  # ALWAYS applied or -t target
    LEAVES = 0x10  # LEAVES applied
    NOUPDATE = 0x20  # NOUPDATE applied
    INTERNAL = 0x40  # internal INCLUDES node


class Binding(IntEnum):
    """How a target relates to a real file."""

    UNBOUND = 0  # a disembodied name
    MISSING = 1  # couldn't find real file
    PARENTS = 2  # using parent's timestamp
    EXISTS = 3  # real file, timestamp valid


class Fate(IntEnum):
    """What the dependency scan decided about a target."""

    INIT = 0
    MAKING = 1
    STABLE = 2
    NEWER = 3
    SPOIL = 4  # >= SPOIL rebuilds parents
    ISTMP = 4
    BUILD = 5  # >= BUILD rebuilds target
    TOUCHED = 5
    MISSING = 6
    NEEDTMP = 7
    OUTDATED = 8
    UPDATE = 9
    BROKEN = 10  # >= BROKEN ruins parents
    CANTFIND = 10
    CANTMAKE = 11


class Progress(IntEnum):
    """How far updating a target has come."""

    INIT = 0
    ONSTACK = 1
    ACTIVE = 2
    RUNNING = 3
    DONE = 4


@dataclass
class Rule:
    """A jam rule: a procedure, actions, or both."""

    name: str
    procedure: ParseNode | None = None
    actions: str | None = None
    bindlist: list[str] = field(default_factory=list)
    params: list[str] = field(default_factory=list)
    flags: RuleFlag = RuleFlag.NONE


@dataclass
class Setting:
    """A variable to set while a target's actions run."""

    symbol: str
    value: list[str] = field(default_factory=list)


@dataclass(eq=False)
class Target:
    """A file or other thing that can be built."""

    name: str
    boundname: str = ""
    actions: list[Action] = field(default_factory=list)
    settings: list[Setting] = field(default_factory=list)
    flags: TargetFlag = TargetFlag.NONE
    binding: Binding = Binding.UNBOUND
    depends: list[Target] = field(default_factory=list)
    includes: Target | None = None
    time: float = 0
    leaf: float = 0
    fate: Fate = Fate.INIT
    progress: Progress = Progress.INIT
    status: int = 0
    asynccnt: int = 0
    parents: list[Target] = field(default_factory=list)
    cmds: Any = None

    def __post_init__(self) -> None:
        if not self.boundname:
            self.boundname = self.name


@dataclass(eq=False)
class Action:
    """An invocation of a rule on targets and sources."""

    rule: Rule
    targets: list[Target] = field(default_factory=list)
    sources: list[Target] = field(default_factory=list)
    running: bool = False
    status: int = 0


class Registry:
    """The tables of known rules and targets."""

    def __init__(self) -> None:
        self.rules: dict[str, Rule] = {}
        self.targets: dict[str, Target] = {}

    def bind_rule(self, name: str) -> Rule:
        """Return the rule called ``name``, creating it if necessary."""
        rule = self.rules.get(name)
        if rule is None:
            rule = self.rules[name] = Rule(name)
        return rule

    def bind_target(self, name: str) -> Target:
        """Return the target called ``name``, creating it if necessary."""
        target = self.targets.get(name)
        if target is None:
            target = self.targets[name] = Target(name)
        return target

    def copy_target(self, target: Target) -> Target:
        """Make an internal target with ``target``'s name, not registered."""
        return Target(target.name, flags=TargetFlag.NOTFILE | TargetFlag.INTERNAL)

    def touch_target(self, name: str) -> Target:
        """Mark the target called ``name`` as if it were new."""
        target = self.bind_target(name)
        target.flags |= TargetFlag.TOUCHED
        return target

    def target_list(self, chain: list[Target] | None, names: Iterable[str]) -> list[Target]:
        """Append the targets called ``names`` to ``chain`` and return it."""
        chain = [] if chain is None else chain
        chain.extend(self.bind_target(name) for name in names)
        return chain


def add_settings(
    settings: list[Setting] | None,
    flag: VarFlag,
    symbol: str,
    value: Iterable[str],
) -> list[Setting]:
    """Add a deferred variable setting and return the settings list.

    A new symbol goes to the front.  For a symbol already present, ``flag``
    decides whether the value is replaced, appended to or left alone.
    """
    settings = [] if settings is None else settings
    existing = next((s for s in settings if s.symbol == symbol), None)
    if existing is None:
        settings.insert(0, Setting(symbol, list(value)))
    elif flag is VarFlag.SET:
        existing.value = list(value)
    elif flag is VarFlag.APPEND:
        existing.value.extend(value)
    return settings


def copy_settings(settings: Iterable[Setting]) -> list[Setting]:
    """Return an independent copy of a settings list."""
    return [Setting(s.symbol, list(s.value)) for s in settings]


def push_settings(settings: Iterable[Setting], variables: Variables) -> None:
    """Put target-specific values in place, keeping the global ones."""
    for setting in settings:
        setting.value = variables.swap(setting.symbol, setting.value)


def pop_settings(settings: Iterable[Setting], variables: Variables) -> None:
    """Restore the values that :func:`push_settings` replaced."""
    push_settings(settings, variables)