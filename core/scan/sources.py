"""Symbol sources feeding the scan driver one symbol at a time."""

from __future__ import annotations

from typing import BinaryIO, Protocol

from core.automaton.models import END_OF_INPUT, EndOfInput


class SymbolSource(Protocol):
    """Sequential, read-once producer of input symbols."""

    def read_symbol(self) -> str | EndOfInput:
        """Return the next symbol or END_OF_INPUT once exhausted."""


class TextSymbolSource:
    """Symbols from an in-memory string."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._position = 0

    def read_symbol(self) -> str | EndOfInput:
        if self._position >= len(self._text):
            return END_OF_INPUT
        symbol = self._text[self._position]
        self._position += 1
        return symbol


class ByteStreamSource:
    """Symbols from a binary stream, one byte each, decoded as latin-1."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def read_symbol(self) -> str | EndOfInput:
        chunk = self._stream.read(1)
        if not chunk:
            return END_OF_INPUT
        return chunk.decode("latin-1")
