"""Paths: sequences of symbols that address elements in a tree.

A symbol is a non-empty string; the empty string stands for "no symbol".
The copy number lets a path refer to one specific element of a
multi-container: copies are numbered from 1, and 0 means all of them.
"""

from __future__ import annotations

from typing import Iterator, Union

MAX_SYMBOLS = 15
"""Maximum path depth; symbols past this are dropped."""

_PathPart = Union["Path", str]


class Path:
    """An immutable sequence of at most ``MAX_SYMBOLS`` symbols."""

    __slots__ = ("_symbols", "copy")

    def __init__(self, *parts: _PathPart, separator: str = "/", copy: int = 0) -> None:
        if len(separator) != 1:
            raise ValueError("separator must be a single character")
        symbols: list[str] = []
        for part in parts:
            if isinstance(part, Path):
                symbols.extend(part._symbols)
            elif isinstance(part, str):
                symbols.extend(s for s in part.split(separator) if s)
            else:
                raise TypeError(f"cannot make a Path from {type(part).__name__}")
        self._symbols: tuple[str, ...] = tuple(symbols[:MAX_SYMBOLS])
        self.copy = copy

    @property
    def symbols(self) -> tuple[str, ...]:
        return self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[str]:
        return iter(self._symbols)

    def __getitem__(self, index: int) -> str:
        return self._symbols[index]

    def __bool__(self) -> bool:
        return bool(self._symbols)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            other = Path(other)
        if not isinstance(other, Path):
            return NotImplemented
        return self._symbols == other._symbols

    def __hash__(self) -> int:
        return hash(self._symbols)

    def __str__(self) -> str:
        text = path_to_text(self)
        if self.copy:
            text += f"(#{self.copy})"
        return text

    def __repr__(self) -> str:
        return f"Path({path_to_text(self)!r}, copy={self.copy})"

    def begins_with(self, other: Path) -> bool:
        """True if every symbol of ``other`` starts this path."""
        n = len(other)
        return n <= len(self) and self._symbols[:n] == other._symbols


def nth(p: Path, n: int) -> str:
    """The symbol at position ``n``, or the empty symbol if there is none."""
    return p.symbols[n] if 0 <= n < len(p) else ""


def head(p: Path) -> str:
    return nth(p, 0)


def first(p: Path) -> str:
    return nth(p, 0)


def second(p: Path) -> str:
    return nth(p, 1)


def third(p: Path) -> str:
    return nth(p, 2)


def fourth(p: Path) -> str:
    return nth(p, 3)


def fifth(p: Path) -> str:
    return nth(p, 4)


def tail(p: Path) -> Path:
    """All symbols but the first, keeping the copy number."""
    r = Path()
    r._symbols = p.symbols[1:]
    r.copy = p.copy
    return r


def but_last(p: Path) -> Path:
    r = Path()
    r._symbols = p.symbols[:-1]
    return r


def last(p: Path) -> str:
    return p.symbols[-1] if p else ""


def last_n(p: Path, n: int) -> Path:
    """The last ``n`` symbols, or an empty path if ``p`` is shorter than that."""
    if len(p) < n:
        return Path()
    r = Path()
    r._symbols = p.symbols[len(p) - n:]
    return r


def substitute(p: Path, from_symbol: str, to: _PathPart) -> Path:
    """Replace each ``from_symbol`` with a symbol, or splice in a Path."""
    if isinstance(to, Path):
        r = Path()
        for symbol in p:
            r = Path(r, to) if symbol == from_symbol else Path(r, Path(symbol))
        return r
    r = Path()
    r._symbols = tuple(to if s == from_symbol else s for s in p)
    r.copy = p.copy
    return r


def path_to_text(p: Path, separator: str = "/") -> str:
    return separator.join(p)


def root_path_to_text(p: Path, separator: str = "/") -> str:
    """Text of the path with a separator before every symbol."""
    return "".join(separator + s for s in p)


def text_to_path(text: str, separator: str = "/") -> Path:
    return Path(text, separator=separator)


def _split_extension(name: str) -> tuple[str, str]:
    dot = name.rfind(".")
    if dot < 0:
        return name, ""
    return name[:dot], name[dot + 1:]


def get_extension_from_path(p: Path) -> str:
    """The extension of the last symbol, without the dot."""
    return _split_extension(last(p))[1]


def remove_extension_from_path(p: Path) -> Path:
    return Path(but_last(p), _split_extension(last(p))[0])


def add_extension_to_path(p: Path, ext: str) -> Path:
    return Path(but_last(p), f"{last(p)}.{ext}")