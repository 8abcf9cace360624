"""Turn command lines into catalog-checked requests."""

from __future__ import annotations

from hdsctl.core.errors import UnexpectedArgumentsError, UnknownCommandError
from hdsctl.core.model import QUERY_MARKER, Catalog, Request

STATEMENT_DELIMITER = ";"


def parse_one(catalog: Catalog, line: str) -> Request:
    """Parse ``<mnemonic>[?] [arg[,arg...]]`` into a request."""
    head, _, tail = line.strip().partition(" ")
    tail = tail.strip()
    definition = catalog.lookup_by_path(head)
    if definition is None:
        raise UnknownCommandError(f"Unknown command: {head}")

    if head.endswith(QUERY_MARKER):
        if tail:
            raise UnexpectedArgumentsError(f"Query takes no arguments: {line.strip()}")
        return Request(definition=definition, query=True)

    if not tail:
        raise UnexpectedArgumentsError(f"Missing argument for {head}")
    return Request(definition=definition, arguments=tuple(tail.split(",")))


def parse_all(catalog: Catalog, text: str) -> list[Request]:
    return [parse_one(catalog, command) for command in text.split(STATEMENT_DELIMITER)]


def iter_script(text: str):
    """Yield the non-blank statements of a multi-line script, in order."""
    for line in text.splitlines():
        for command in line.split(STATEMENT_DELIMITER):
            command = command.strip()
            if command:
                yield command


def is_query(command: str) -> bool:
    head, _, _ = command.strip().partition(" ")
    return head.endswith(QUERY_MARKER)
