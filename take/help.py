"""
Help rendering: the command overview and the per-command detail view.

Both views are built as rich Text so that the same layout serves plain and
colorful output; column widths are computed on the plain text.

Palette keys
- program-name, section-label, bullet, command-name, command-description
- flag-name, short-name, flag-type, flag-description, flag-extras
- error-label, error-message

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed.
"""
import sys
from collections import defaultdict
from datetime import datetime

from rich.console import Console
from rich.text import Text

from .utils import *

_PALETTE = {
    "program-name": "bold #FF4D94",
    "section-label": "bold #FFFFFF",
    "bullet": "#36C5F0 dim",
    "command-name": "bold #36C5F0",
    "command-description": "#9CA3AF",
    "flag-name": "bold #22C55E",
    "short-name": "#22C55E",
    "flag-type": "bold #FFD600",
    "flag-description": "#9CA3AF",
    "flag-extras": "italic #737373",
    "error-label": "bold #EF4444",
    "error-message": "#FFD600",
}


def _styler(colorful):
    styles = defaultdict(str, _PALETTE | getattr(__import__("__main__"), "__styles__", {}))

    def text(fragment, style=""):
        return Text(str(fragment), styles[style] if colorful else "")

    return text


def _columns(rows):
    # rows: (left, right | None); right columns line up one space past the widest left
    width = max((len(left) for left, _ in rows), default=0)
    lines = []
    for left, right in rows:
        if not right:
            lines.append(left)
            continue
        lines.append(Text.assemble(left, " " * (width - len(left)), " ", right))
    return Text("\n").join(lines)


def display(value, /):
    """
    Format a flag value for help and docs (booleans as true/false).
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def visible(commands, environ, /):
    """
    Commands shown in listings: "debug" only when DEBUG=1.
    """
    return [command for command in commands if command.name != "debug" or environ.get("DEBUG") == "1"]


def shorts(specs, /):
    """
    Map each flag name to its short letter, or None when an earlier flag claimed it.
    """
    claimed = set()
    letters = {}
    for spec in specs:
        letter = spec.name[0]
        letters[spec.name] = None if letter in claimed else letter
        claimed.add(letter)
    return letters


def extras(spec, /):
    out = []
    if spec.env:
        out.append(f"env={spec.env}")
    if spec.initial:
        out.append(f"default={display(spec.initial)}")
    return f" ({' '.join(out)})" if out else ""


def overview(commands, prog, environ, /, colorful=False):
    """
    Render the command list.

    layout
        <prog> <command> --help

        commands:
         • <name> - <descr>
    """
    text = _styler(colorful)
    rows = []
    for command in visible(commands, environ):
        left = Text.assemble(" ", text("•", "bullet"), " ", text(command.name, "command-name"))
        right = Text.assemble("- ", text(command.descr, "command-description")) if command.descr else None
        rows.append((left, right))

    return Text.assemble(
        "\n",
        text(prog, "program-name"), " <command> --help\n",
        "\n",
        text("commands", "section-label"), ":\n",
        _columns(rows), "\n",
    )


def detail(command, specs, prog, /, colorful=False):
    """
    Render one command: usage line, description, long help and its flags.
    """
    text = _styler(colorful)
    letters = shorts(specs)
    rows = []
    for spec in specs:
        left = Text.assemble(" ", text(f"--{spec.name}", "flag-name"))
        if letter := letters[spec.name]:
            left.append_text(Text.assemble(", ", text(f"-{letter}", "short-name")))
        if spec.type != "boolean":
            left.append_text(Text.assemble(" ", text(f"<{spec.type}>", "flag-type")))
        right = Text.assemble(" ", text(spec.descr or "", "flag-description"), text(extras(spec), "flag-extras"))
        rows.append((left, right))

    body = Text.assemble(
        "\n",
        text(prog, "program-name"), " ", text(command.name, "command-name"), " <flags>\n",
        "\n",
        text("description", "section-label"), ":\n",
        text(command.descr or ""),
    )
    if command.help:
        body.append_text(Text.assemble("\n\n", text("help", "section-label"), ":\n", text(command.help)))
    body.append_text(Text.assemble(
        "\n\n",
        text("flags", "section-label"), ":\n",
        _columns(rows), "\n",
    ))
    return body


def show(renderable, message=Unset, /, *, file=Unset, colorful=False):
    """
    Print a help view (and the error message, if any), then exit.

    exit status
    - 0 when help was asked for, 1 when it answers an error.
    """
    console = Console(file=coalesce(file), highlight=False)
    text = _styler(colorful)
    console.print(renderable, soft_wrap=True)
    if message:
        console.print(Text.assemble(text("ERROR:", "error-label"), " ", text(message, "error-message")), soft_wrap=True)
        console.print("")
    sys.exit(1 if message else 0)


__all__ = (
    "display",
    "visible",
    "shorts",
    "extras",
    "overview",
    "detail",
    "show",
)
