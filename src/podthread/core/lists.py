"""Nested =over/=item/=back state and item block emission"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable


_NUMBER_RE = re.compile(r'^(\d+)[.)]?\s*$')


class ItemKind(str, Enum):
    bullet = 'bullet'
    number = 'number'
    desc = 'desc'
    block = 'block'


@dataclass
class ListScope:
    """One =over level."""
    kind:     ItemKind | None = None
    tag:      str | None = None     # macro that opens the next item block
    pending:  bool = False          # =item seen, its block not emitted yet
    open:     bool = False          # item block emitted, ] still owed
    number:   int = 1               # next expected item number
    implicit: bool = False          # opened by an =item outside any =over


def classify_item(marker: str, plain: str, expected: int = 1) -> tuple[ItemKind, str]:
    """Return (kind, opening macro) for an =item marker.

    plain is the marker with formatting codes stripped, marker the formatted
    version used as a description label. A number only starts a numbered item
    when it is the next one in sequence.
    """
    plain = plain.strip()
    if not plain or plain == '*':
        return ItemKind.bullet, '\\bullet'
    m = _NUMBER_RE.match(plain)
    if m and int(m.group(1)) == expected:
        return ItemKind.number, '\\number'
    return ItemKind.desc, f'\\desc[{marker}]'


class ListStack:
    """Tracks open lists and writes item blocks through emit.

    Item opening macros are held until the item's first body block arrives,
    so ``\\desc[label]`` and its ``[`` are written together with the text.
    """

    def __init__(self, emit: Callable[[str], None]):
        self._emit = emit
        self.scopes: list[ListScope] = []
        self.opened = 0
        self.closed = 0

    def __bool__(self) -> bool:
        return bool(self.scopes)

    @property
    def depth(self) -> int:
        return len(self.scopes)

    def _open(self, scope: ListScope, body: str) -> None:
        if scope.open:
            self._close(scope)
        tag = scope.tag if scope.pending and scope.tag else '\\block'
        if scope.kind is None:
            scope.kind = ItemKind.block
        self._emit(f'{tag}\n[{body}')
        self.opened += 1
        scope.open = True
        scope.pending = False

    def _close(self, scope: ListScope) -> None:
        if scope.open:
            self._emit(']\n\n')
            self.closed += 1
            scope.open = False

    def over(self) -> None:
        """Enter a nested list; an enclosing item is opened so the list lands inside it."""
        if self.scopes:
            parent = self.scopes[-1]
            if parent.pending or not parent.open:
                self._open(parent, '')
        self.scopes.append(ListScope())

    def back(self) -> bool:
        """Leave the current list. Returns False for a =back with no open =over."""
        while self.scopes and self.scopes[-1].implicit:
            self._end(self.scopes.pop())
        if not self.scopes:
            return False
        self._end(self.scopes.pop())
        return True

    def _end(self, scope: ListScope) -> None:
        if scope.pending:
            self._open(scope, '')
        self._close(scope)
        if self.scopes:
            self.scopes[-1].open = True

    def item(self, marker: str, plain: str) -> ItemKind:
        """Start an item; the previous pending item is flushed with an empty body."""
        if not self.scopes:
            self.scopes.append(ListScope(implicit=True))
        scope = self.scopes[-1]
        if scope.pending:
            self._open(scope, '')
        kind, tag = classify_item(marker, plain, scope.number)
        if kind is ItemKind.number:
            scope.number += 1
        scope.kind = scope.kind or kind
        scope.tag = tag
        scope.pending = True
        return kind

    def body(self, text: str) -> None:
        """Body block for the current item, or a continuation of the open one."""
        scope = self.scopes[-1]
        if scope.pending or not scope.open:
            self._open(scope, text)
        else:
            self._emit(text)

    def finish_item(self) -> None:
        """Flush a pending item and close the open block of the innermost list."""
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if scope.pending:
            self._open(scope, '')
        self._close(scope)

    def close_all(self) -> int:
        """Close every open list at end of document; returns how many were open."""
        count = len(self.scopes)
        while self.scopes:
            self._end(self.scopes.pop())
        return count
