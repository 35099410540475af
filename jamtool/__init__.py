"""Core pieces of a Jam-style build tool: regexps, output filters, paths, variables, rules, scanning and search."""

__version__ = "2.5.8"