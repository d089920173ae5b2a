"""DICT payload parsing.

Interprets the status messages and text blocks of DEFINE, MATCH and SHOW
replies into domain records. Server ordering is preserved everywhere.
"""

import re

from domain.model.dictionary import CatalogEntry, DefinitionEntry, MatchEntry, StatusReply
from domain.model.errors import ParseError

# One parameter: a double-quoted string (backslash escapes) or a bare atom
_PARAM = re.compile(r'"((?:[^"\\]|\\.)*)"|([^\s"]+)')
_ESCAPE = re.compile(r"\\(.)")
_COUNT = re.compile(r"^(\d+)\s+\S+")


def split_params(text: str) -> list[str] | None:
    """Split a line into atoms and quoted strings.

    Returns None when the line holds something that is neither,
    e.g. an unterminated quote.
    """
    params: list[str] = []
    pos = 0
    length = len(text)
    while pos < length:
        if text[pos].isspace():
            pos += 1
            continue
        match = _PARAM.match(text, pos)
        if not match:
            return None
        quoted, atom = match.groups()
        params.append(_ESCAPE.sub(r"\1", quoted) if quoted is not None else atom)
        pos = match.end()
    return params


def parse_definition_count(message: str) -> int:
    """Read N from a 150 message such as ``"3 definitions retrieved"``."""
    match = _COUNT.match(message.strip())
    if not match:
        raise ParseError("Missing definition count", raw_line=message)
    return int(match.group(1))


def parse_definition_header(text: str) -> tuple[str, str, str]:
    """Parse ``<word> <database> "<description>"`` from a 151 status."""
    params = split_params(text)
    if params is None or len(params) != 3:
        raise ParseError("Invalid definition header", raw_line=text)
    headword, database, description = params
    return headword, database, description


def parse_definitions(count: int, replies: list[StatusReply]) -> list[DefinitionEntry]:
    """Build one DefinitionEntry per 151 reply, checking the declared count."""
    entries = []
    for reply in replies:
        headword, database, description = parse_definition_header(reply.message)
        entries.append(DefinitionEntry(
            headword=headword,
            database=database,
            description=description,
            body=reply.lines,
        ))

    if len(entries) != count:
        raise ParseError(
            f"Server declared {count} definitions but sent {len(entries)}"
        )
    return entries


def parse_match_lines(lines: tuple[str, ...]) -> list[MatchEntry]:
    """Parse ``<database> "<word>"`` lines of a 152 block."""
    matches = []
    for line in lines:
        params = split_params(line)
        if params is None or len(params) != 2:
            raise ParseError("Invalid match line", raw_line=line)
        matches.append(MatchEntry(database=params[0], word=params[1]))
    return matches


def parse_catalog_lines(lines: tuple[str, ...]) -> list[CatalogEntry]:
    """Parse ``<name> "<description>"`` lines of a SHOW DB / SHOW STRAT block."""
    catalog = []
    for line in lines:
        params = split_params(line)
        if params is None or len(params) != 2:
            raise ParseError("Invalid listing line", raw_line=line)
        catalog.append(CatalogEntry(name=params[0], description=params[1]))
    return catalog
