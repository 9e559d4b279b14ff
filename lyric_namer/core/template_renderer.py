"""Template renderer -- turns naming templates into strings.

Syntax:
    ``{name}``         value of variable ``name`` (empty when undefined)
    ``{number:NNd}``   the ``number`` variable zero-padded to width NN

Only the first ``{number:NNd}`` directive of a template is expanded; any
later ones are left as written.  Genre values have ``;`` replaced with
``,`` so a filename never carries the tag delimiter.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from lyric_namer.utils.constants import FILENAME_GENRE_SEPARATOR, GENRE_SEPARATOR

_PLACEHOLDER_RE = re.compile(r"\{(\w+)(?::(\d+)d)?\}")
_NUMBER_RE = re.compile(r"\{number(?::\d+d)?\}")


def render(template: str | None, variables: Mapping[str, Any]) -> str:
    """Render a template against a variable bag.

    Never raises: unknown variables and ``None`` values render as ``""``.

    Args:
        template: Template string, may be empty or None.
        variables: Variable bag (artist, title, album, genre, year, number...).

    Returns:
        The rendered string.
    """
    if not template:
        return ""

    padded_seen = False

    def _substitute(match: re.Match) -> str:
        nonlocal padded_seen
        name, width = match.group(1), match.group(2)

        if width is not None:
            if name != "number" or padded_seen:
                return match.group(0)
            padded_seen = True
            value = variables.get("number")
            if value is None:
                return ""
            return str(value).rjust(int(width), "0")

        return _format_value(name, variables.get(name))

    return _PLACEHOLDER_RE.sub(_substitute, template)


def has_number_placeholder(template: str | None) -> bool:
    """Check whether a template contains ``{number}`` or ``{number:NNd}``."""
    return bool(template) and _NUMBER_RE.search(template) is not None


def _format_value(name: str, value: Any) -> str:
    if value is None:
        return ""
    text = str(value)
    if name == "genre":
        text = text.replace(GENRE_SEPARATOR, FILENAME_GENRE_SEPARATOR)
    return text
