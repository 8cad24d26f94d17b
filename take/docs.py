"""
Documentation injection: keep a markdown command reference inside a text file.

The reference is written between two markers and replaces whatever was there
before; text outside the markers is left untouched. A file without markers
gets the block appended. A missing file is left missing.

    <!-- take:start -->
    - `build` - Build the project
      - `--watch` `-w` - Watch for changes
      - `--output` `-o` <string> - Output directory (default=dist)
    <!-- take:end -->
"""
import logging
import os
import sys

from .flags import namedflags
from .help import extras, shorts, visible
from .utils import *

logger = logging.getLogger(__name__)

START = "<!-- take:start -->"
END = "<!-- take:end -->"


def markdown(commands, environ, /):
    """
    Render the command reference as markdown list lines.
    """
    lines = []
    for command in visible(commands, environ):
        lines.append(f"- `{command.name}`" + (f" - {command.descr}" if command.descr else ""))
        specs = namedflags(command.flags)
        letters = shorts(specs)
        for spec in specs:
            line = f"  - `--{spec.name}`"
            if letter := letters[spec.name]:
                line += f" `-{letter}`"
            if spec.type != "boolean":
                line += f" <{spec.type}>"
            lines.append(f"{line} - {spec.descr}{extras(spec)}")
    return "\n".join(lines)


def splice(content, block, /):
    """
    Replace the marked region of content with block, or append it.
    """
    section = f"{START}\n{block}\n{END}"
    start = content.find(START)
    end = content.find(END, start + len(START)) if start >= 0 else -1
    if start >= 0 and end >= 0:
        return content[:start] + section + content[end + len(END):]
    if content and not content.endswith("\n"):
        content += "\n"
    return f"{content}\n{section}\n" if content else f"{section}\n"


def inject(path, commands, environ, /, root=Unset):
    """
    Write the command reference into the file at path.

    parameters
    - path: target file; relative paths resolve against root.
    - root: defaults to the directory of the running script (sys.argv[0]).

    returns
    - True when the file exists (and was brought up to date), False otherwise.
    """
    if not os.path.isabs(path):
        root = coalesce(root, os.path.dirname(os.path.abspath(sys.argv[0] or ".")))
        path = os.path.join(root, path)
    if not os.path.isfile(path):
        logger.debug("skipping docs injection, %s does not exist", path)
        return False

    with open(path, encoding="utf-8") as file:
        content = file.read()
    updated = splice(content, markdown(commands, environ))
    if updated != content:
        with open(path, "w", encoding="utf-8") as file:
            file.write(updated)
        logger.debug("injected command reference into %s", path)
    return True


__all__ = (
    "START",
    "END",
    "markdown",
    "splice",
    "inject",
)
