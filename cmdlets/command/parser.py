"""Invocation grammar: one chain element -> (command, argument form).

Valid forms::

    fn                        -> NoArgs
    fn() / fn[]               -> NoArgs
    fn(randy, 20)             -> Positional(("randy", "20"))
    fn(name: 'randy', age: 20)
                              -> Named({"name": "randy", "age": 20})
    fn(http://host:8080/)     -> Positional(("http://host:8080/",))

``(`` is looked for first and ``[`` only when there is no ``(``. The
matching closer must be the token's last character. Argument bodies
containing ``:`` go through three explicit stages, each of which
returns None when it does not apply: a JSON5 object literal, relaxed
``key: bare value`` pairs, and finally the plain comma split. The last
stage is what lets URLs and other colon-bearing values through as
positional arguments.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

import json5

from cmdlets.command.chain import Invocation
from cmdlets.core.constants import ARG_DELIMITERS, CASCADE_DELIMITER
from cmdlets.core.errors import EmptyCommandName, UnknownCommand, UnterminatedArgumentList
from cmdlets.core.types import NO_ARGS, ArgumentForm, Named, Positional

if TYPE_CHECKING:
    from cmdlets.command.registry import CommandRegistry

logger = logging.getLogger(__name__)

# key: value, where key is an identifier or quoted and value is quoted or
# a bare run of text without quotes, colons, braces, brackets or slashes
_PAIR_PATTERN = re.compile(
    r"""^\s*
    (?P<key>[A-Za-z_$][\w$]*|'[^']*'|"[^"]*")
    \s*:\s*
    (?P<value>'[^']*'|"[^"]*"|[^'":{}\[\]/]+?)
    \s*$""",
    re.VERBOSE,
)


def split_chain(raw: str) -> list[str]:
    """Split one CLI token on the cascade delimiter.

    Elements are trimmed; empty elements (``" * "``) are dropped.
    """
    return [e for e in (part.strip() for part in raw.split(CASCADE_DELIMITER)) if e]


def split_call(token: str) -> tuple[str, ArgumentForm]:
    """Split a chain element into command name and argument form.

    Raises:
        UnterminatedArgumentList: If an argument list is opened but the
            token does not end with the matching closer.
        EmptyCommandName: If no name precedes the argument list.
    """
    token = token.strip()
    for opener, closer in ARG_DELIMITERS:
        i = token.find(opener)
        if i == -1:
            continue
        name = token[:i].strip()
        if not token.endswith(closer):
            raise UnterminatedArgumentList(token, name, closer)
        if not name:
            raise EmptyCommandName(token)
        return name, parse_arguments(token[i + 1:-1])

    if not token:
        raise EmptyCommandName(token)
    return token, NO_ARGS


def parse_arguments(body: str) -> ArgumentForm:
    """Parse the text between the argument delimiters."""
    body = body.strip()
    if not body:
        return NO_ARGS
    if ":" in body:
        named = _parse_object_literal(body)
        if named is None:
            named = _parse_relaxed_pairs(body)
        if named is not None:
            return Named(named)
        logger.debug("Named argument parse failed, using positional: %r", body)
    return Positional(tuple(piece.strip() for piece in body.split(",")))


def parse_invocation(token: str, registry: CommandRegistry) -> Invocation:
    """Parse one chain element and resolve its command.

    Raises:
        ParseError: UnterminatedArgumentList, EmptyCommandName or
            UnknownCommand.
    """
    name, args = split_call(token)
    spec = registry.get(name)
    if spec is None:
        raise UnknownCommand(name, token)
    logger.debug("Parsed %r -> %s %r", token, name, args)
    return Invocation(spec=spec, args=args, token=token.strip())


def parse_chain(raw: str, registry: CommandRegistry) -> tuple[Invocation, ...]:
    """Parse every element of a cascade token, in order."""
    return tuple(parse_invocation(element, registry) for element in split_chain(raw))


def _parse_object_literal(body: str) -> dict[str, Any] | None:
    """JSON5 stage: ``{body}`` as an object, or None. Last duplicate key wins."""
    try:
        result = json5.loads(f"{{{body}}}")
    except ValueError:
        return None
    return result if isinstance(result, dict) else None


def _parse_relaxed_pairs(body: str) -> dict[str, Any] | None:
    """Bare-value stage: every comma piece must be ``key: value``, or None.

    A repeated key keeps its last value, as in the JSON5 stage.
    """
    values: dict[str, Any] = {}
    for piece in body.split(","):
        match = _PAIR_PATTERN.match(piece)
        if match is None:
            return None
        key = _unquote(match.group("key"))
        values[key] = _relaxed_value(match.group("value").strip())
    return values


def _relaxed_value(raw: str) -> Any:
    if raw[:1] in ("'", '"'):
        return _unquote(raw)
    try:
        value = json5.loads(raw)
    except ValueError:
        return raw
    # Only literals (numbers, booleans, null) are converted; words stay strings
    return value if value is None or isinstance(value, (bool, int, float)) else raw


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text
