"""Result assembly — turns lookup results into bulk text items.

In ``single`` mode every definition is folded into one item, grouped by
database; ``array`` and ``lines`` modes emit one item per definition.
"""

import html
import json

from domain.model.dictionary import CatalogEntry, DefinitionEntry, LookupResult
from domain.model.errors import (
    DictConnectionError,
    DictError,
    ProtocolError,
    ServerError,
    ValidationError,
)
from launcher.models import BulkTextItem
from utils.config import Settings

NOT_FOUND_TITLE = "No definition found"
RULE = "────────────"


def _escape(text: str, markup: bool) -> str:
    return html.escape(text, quote=False) if markup else text


def _section_header(title: str, markup: bool) -> str:
    if markup:
        return f"─── <b><i>{_escape(title, markup)}</i></b> ───"
    return f"─── {title} ───"


def _wrap(body: str, markup: bool) -> str:
    if markup:
        return f'<span font_desc="monospace">\n{body}</span>'
    return body


def format_entries(entries: list[DefinitionEntry] | tuple[DefinitionEntry, ...], markup: bool) -> str:
    """Render definitions grouped under one rule per database, in server order."""
    parts: list[str] = []
    current_database = None
    for entry in entries:
        if entry.database != current_database:
            current_database = entry.database
            parts.append(_section_header(entry.description or entry.database, markup) + "\n\n")
        if entry.body:
            parts.append(_escape(entry.text, markup) + "\n")
        parts.append("\n")
    parts.append(RULE + "\n")
    return _wrap("".join(parts), markup)


def assemble(result: LookupResult, settings: Settings) -> list[BulkTextItem]:
    """Build the bulk text items for a finished lookup."""
    icon = settings.icon
    markup = settings.markup

    if not result.found:
        content = ""
        if result.suggestions:
            words = list(dict.fromkeys(match.word for match in result.suggestions))
            content = "Did you mean: " + ", ".join(_escape(word, markup) for word in words)
        return [BulkTextItem(title=NOT_FOUND_TITLE, content=content, icon=icon)]

    if settings.output.mode == "single":
        content = format_entries(result.entries, markup)
        return [BulkTextItem(
            title=f'Definition of "{result.word}"',
            content=content,
            next_content=content,
            icon=icon,
        )]

    items = []
    for entry in result.entries:
        content = format_entries([entry], markup)
        items.append(BulkTextItem(
            title=f"{entry.headword} — {entry.description or entry.database}",
            content=content,
            next_content=content,
            icon=icon,
        ))
    return items


def assemble_error(error: DictError, word: str, settings: Settings) -> list[BulkTextItem]:
    """Build the single item that reports a failed lookup."""
    if isinstance(error, ServerError):
        title = f"Server error {error.code}"
        content = error.message
    elif isinstance(error, DictConnectionError):
        title = "Connection error"
        content = str(error)
    elif isinstance(error, ProtocolError):
        title = "Protocol error"
        content = str(error)
    elif isinstance(error, ValidationError):
        title = "Invalid input"
        content = str(error)
    else:
        title = "Lookup failed"
        content = str(error)

    if word:
        title = f"{title} for '{word}'"
    return [BulkTextItem(title=title, content=_escape(content, settings.markup), icon=settings.icon)]


def assemble_catalog(entries: list[CatalogEntry], kind: str, settings: Settings) -> list[BulkTextItem]:
    """Build items for a SHOW DB / SHOW STRAT listing."""
    markup = settings.markup
    if settings.output.mode == "single":
        width = max((len(entry.name) for entry in entries), default=0)
        lines = [
            f"{_escape(entry.name.ljust(width), markup)}  {_escape(entry.description, markup)}\n"
            for entry in entries
        ]
        content = _wrap("".join(lines), markup)
        return [BulkTextItem(
            title=f"{len(entries)} {kind} available",
            content=content,
            next_content=content,
            icon=settings.icon,
        )]

    return [
        BulkTextItem(title=entry.name, content=_escape(entry.description, markup), icon=settings.icon)
        for entry in entries
    ]


def render(items: list[BulkTextItem], settings: Settings) -> str:
    """Serialize items in the configured output mode."""
    schema = settings.output
    rows = [item.to_payload(schema) for item in items]
    if schema.mode == "lines":
        return "\n".join(json.dumps(row, ensure_ascii=False) for row in rows)
    if schema.mode == "single" and len(rows) == 1:
        return json.dumps(rows[0], ensure_ascii=False)
    return json.dumps(rows, ensure_ascii=False)
