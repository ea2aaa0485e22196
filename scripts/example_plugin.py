#!/usr/bin/env python3
"""Example Kakoune plugin written with kak_bridge.

Load it from your kakrc:

    declare-option -hidden str-list py_notes
    evaluate-commands %sh{ python3 /path/to/scripts/example_plugin.py }

Kakoune then has three new commands:

    :py-where            echo the current file and cursor line
    :py-note <text>      remember a note and report how many are stored
    :py-shout <text>     echo the text upper-cased; fails on empty input
"""

from __future__ import annotations

import sys

from kak_bridge import Block, Command, CommandRegistry, Kak, main, option, variables

registry = CommandRegistry()


@registry.command(exports=[variables.BUFFILE, variables.CURSOR_LINE], override=True)
def py_where(kak: Kak) -> None:
    """Echo the current file and cursor line."""
    buffile = kak.var(variables.BUFFILE) or "<scratch>"
    kak.echo(f"{buffile}:{kak.var(variables.CURSOR_LINE)}")


def _store_note(kak: Kak) -> None:
    (note,) = kak.params
    kak.set_option("global", "py_notes", note, add=True)


def _report_notes(kak: Kak) -> None:
    notes = kak.opt_list("py_notes") or []
    kak.echo(f"{len(notes)} note(s) stored, latest: {notes[-1] if notes else '-'}")


# Kakoune runs the sub-blocks in order, so the second block sees the option
# the first one updated.
registry.register(
    Command(
        name="py-note",
        blocks=(
            Block(_store_note),
            Block(_report_notes, exports=[option("py_notes")]),
        ),
        params=1,
        docstring="py-note <text>: remember a note",
        override=True,
    )
)


@registry.command(params=1, override=True)
def py_shout(kak: Kak) -> None:
    """Echo the argument upper-cased."""
    (text,) = kak.params
    if not text.strip():
        msg = "nothing to shout"
        raise ValueError(msg)
    kak.echo(text.upper())


if __name__ == "__main__":
    sys.exit(main(registry))
