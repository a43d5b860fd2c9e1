"""Registry dump parser.

Decodes the tree printed by ``ioreg`` into ordered property events::

    +-o Root  <class IORegistryEntry, id 0x100000100, retain 26>
      +-o AppleSmartBattery  <class AppleSmartBattery, id 0x10000030b, ...>
          {
            "CurrentCapacity" = 3005
            "IsCharging" = No
          }

Indentation is made of spaces and ``|`` tree guides; an object line at
depth ``d`` sits ``d // 2`` objects deep. Property values are handed out
as raw text; consumers coerce them.

:class:`IORegLineParser` is the single state machine. :func:`parse_ioreg`
and :func:`parse_ioreg_async` only differ in how they pull lines, so both
produce identical event lists. Either one raises
:class:`~pycello.exceptions.CelloFormatError` on malformed input and
returns nothing partial.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, Iterable
from dataclasses import dataclass

from pycello._constants import IOREG_OBJECT_ID_OFFSET, IOREG_OBJECT_NAME_OFFSET, IOREG_VALUE_OFFSET
from pycello.exceptions import CelloFormatError

_logger = logging.getLogger(__name__)

_INDENT_CHARS = frozenset(" |")
_VALUE_SEPARATOR = " = "


@dataclass(frozen=True, slots=True)
class IORegObject:
    """An object-start line: its name and the identifier token after it."""

    name: str
    identifier: str


@dataclass(frozen=True, slots=True)
class IORegProperty:
    name: str
    value: str


@dataclass(frozen=True, slots=True)
class IORegEvent:
    """One scalar property together with the objects enclosing it."""

    stack: tuple[IORegObject, ...]
    obj: IORegObject
    prop: IORegProperty


def line_depth(line: str) -> int | None:
    """Index of the first character that is not indentation, ``None`` if blank."""
    for index, char in enumerate(line):
        if char not in _INDENT_CHARS:
            return index
    return None


class IORegLineParser:
    """Line-at-a-time state machine over a registry dump."""

    def __init__(self) -> None:
        self._objects: list[IORegObject] = []
        self._in_body = False
        self._line_number = 0

    @property
    def stack(self) -> tuple[IORegObject, ...]:
        return tuple(self._objects)

    @property
    def in_body(self) -> bool:
        return self._in_body

    def feed(self, raw_line: str | bytes) -> IORegEvent | None:
        """Consume one line and return the property event it carries, if any.

        Byte lines are decoded as UTF-8 and trailing line breaks dropped.
        """
        self._line_number += 1
        line = self._text(raw_line)
        depth = line_depth(line)
        if depth is None:
            return None
        if self._in_body:
            return self._body_line(line, depth)
        self._structure_line(line, depth)
        return None

    def _text(self, raw_line: str | bytes) -> str:
        if isinstance(raw_line, bytes):
            try:
                raw_line = raw_line.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise self._error(f"Invalid UTF-8 at byte {exc.start}", raw_line.decode("utf-8", "replace")) from exc
        return raw_line.rstrip("\r\n")

    def _error(self, message: str, line: str) -> CelloFormatError:
        return CelloFormatError(
            f"{message} (line {self._line_number}): {line!r}",
            line_number=self._line_number,
            line=line,
        )

    def _body_line(self, line: str, depth: int) -> IORegEvent | None:
        if line[depth] == "}":
            self._in_body = False
            return None

        name_start = depth + 1
        name_end = line.find('"', name_start)
        if name_end == -1:
            raise self._error("Unterminated property name", line)
        value_start = name_end + IOREG_VALUE_OFFSET
        if len(line) < value_start or line[name_end + 1 : value_start] != _VALUE_SEPARATOR:
            raise self._error("Missing property value", line)
        if not self._objects:
            return None
        prop = IORegProperty(
            name=line[name_start:name_end],
            value=line[value_start:],
        )
        return IORegEvent(stack=tuple(self._objects), obj=self._objects[-1], prop=prop)

    def _structure_line(self, line: str, depth: int) -> None:
        marker = line[depth]
        if marker == "{":
            self._in_body = True
            return
        if marker != "+":
            raise self._error(f"Unexpected line marker {marker!r}", line)

        del self._objects[depth // 2 :]

        name_start = depth + IOREG_OBJECT_NAME_OFFSET
        name_end = line.find(" ", name_start)
        if name_end == -1:
            raise self._error("Unterminated object name", line)
        id_start = name_end + IOREG_OBJECT_ID_OFFSET
        id_end = line.find(" ", id_start)
        if id_end == -1:
            raise self._error("Unterminated object identifier", line)
        self._objects.append(IORegObject(name=line[name_start:name_end], identifier=line[id_start:id_end]))


def parse_ioreg(lines: Iterable[str | bytes]) -> list[IORegEvent]:
    """Parse a registry dump from a blocking line source (file, list, ...)."""
    parser = IORegLineParser()
    events: list[IORegEvent] = []
    for line in lines:
        event = parser.feed(line)
        if event is not None:
            events.append(event)
    _logger.debug("Parsed %d registry properties", len(events))
    return events


async def parse_ioreg_async(lines: AsyncIterable[str | bytes]) -> list[IORegEvent]:
    """Parse a registry dump from an async line source (e.g. ``asyncio.StreamReader``).

    Suspends only between lines; cancelling the task discards everything
    parsed so far.
    """
    parser = IORegLineParser()
    events: list[IORegEvent] = []
    async for line in lines:
        event = parser.feed(line)
        if event is not None:
            events.append(event)
    _logger.debug("Parsed %d registry properties", len(events))
    return events
