"""
Message parser for the sensor wire protocol.

Two line formats are recognised:

    S<id>                                  registration
    m<id> x=<number> y=<number> z=<number> data sample

Tokens are separated by whitespace (commas are tolerated); axis tokens are
located by key, so their order does not matter, but all three must be present.
Ids outside 1..max_streams are rejected here and never reach the registry.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Union

AXES = ('x', 'y', 'z')

# Signed decimal with optional exponent, ASCII digits only
_NUMBER = re.compile(r'[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?', re.ASCII)

# Spellings a microcontroller prints for non-finite floats
_NON_FINITE = frozenset({'nan', '-nan', 'inf', '+inf', '-inf'})


def _is_number(token: str) -> bool:
    return _NUMBER.fullmatch(token) is not None or token.lower() in _NON_FINITE


@dataclass(frozen=True)
class Registration:
    stream_id: int


@dataclass(frozen=True)
class Data:
    stream_id: int
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class Invalid:
    line: str
    reason: str


Message = Union[Registration, Data, Invalid]


class MessageParser:
    """Turns one text line into a Registration, Data or Invalid message."""

    def __init__(self, max_streams: int = 6):
        self.max_streams = max_streams

    def parse(self, line: str) -> Message:
        text = line.strip() if isinstance(line, str) else ""
        if not text:
            return Invalid(line, "empty line")

        tokens = text.replace(',', ' ').split()
        head = tokens[0]

        if head[0] == 'S':
            if len(tokens) != 1:
                return Invalid(line, "unexpected tokens after registration")
            stream_id = self._parse_id(head[1:])
            if stream_id is None:
                return Invalid(line, "invalid stream id")
            return Registration(stream_id)

        if head[0] == 'm':
            stream_id = self._parse_id(head[1:])
            if stream_id is None:
                return Invalid(line, "invalid stream id")
            return self._parse_data(line, stream_id, tokens[1:])

        return Invalid(line, "unrecognised message")

    def _parse_id(self, text: str) -> Optional[int]:
        if len(text) != 1 or text not in "0123456789":
            return None
        stream_id = int(text)
        if not 1 <= stream_id <= self.max_streams:
            return None
        return stream_id

    def _parse_data(self, line: str, stream_id: int, tokens) -> Message:
        raw: Dict[str, str] = {}
        for token in tokens:
            key, sep, value = token.partition('=')
            if sep and key in AXES and key not in raw:
                raw[key] = value

        missing = [axis for axis in AXES if axis not in raw]
        if missing:
            return Invalid(line, f"missing axis {','.join(missing)}")

        bad = [axis for axis in AXES if not _is_number(raw[axis])]
        if bad:
            return Invalid(line, f"unparseable axis value {','.join(bad)}")
        values = {axis: float(raw[axis]) for axis in AXES}

        # Non-finite values pass through; the stream processor discards them
        return Data(stream_id, values['x'], values['y'], values['z'])


_default_parser = MessageParser()


def parse_line(line: str) -> Message:
    """Parse with the default six-stream id range."""
    return _default_parser.parse(line)
