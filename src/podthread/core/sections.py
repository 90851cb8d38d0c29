"""Top-level heading anchors, table of contents, and navigation bar"""

import re

from podthread.core.headings import NAME_HEADING
from podthread.core.parse import plain_text
from podthread.core.text import normalize_space, sanitize


ANCHOR_PREFIX = 'S'
NAVBAR_WIDTH = 65
_SUFFIX_RE = re.compile(r'(\d+)$')


def anchor_key(anchor: str) -> tuple[int, str]:
    """Sort anchors by their numeric suffix so S10 follows S9."""
    m = _SUFFIX_RE.search(anchor)
    return (int(m.group(1)) if m else 0, anchor)


def navbar_label(text: str) -> str:
    """Title-case each word of a heading, leaving 'and' in lowercase."""
    words = []
    for word in text.split():
        lower = word.lower()
        words.append(lower if lower == 'and' else lower[:1].upper() + lower[1:])
    return ' '.join(words)


class SectionRegistry:
    """Maps top-level heading text to anchors for links, contents, and navbar.

    With no ``anchors`` mapping, each registered heading gets the next
    ``S<n>`` anchor in encounter order. With a mapping from heading text to
    the anchors of its occurrences (from a pre-scan), each occurrence takes
    the next unused anchor for its text, or none.
    """

    def __init__(self, anchors: dict[str, list[str]] | None = None):
        self._assigned = {k: list(v) for k, v in anchors.items()} if anchors is not None else None
        self._by_heading: dict[str, str] = {}
        self._entries: dict[str, tuple[str, str]] = {}   # anchor -> (label, plain)
        self._count = 0

    def register(self, heading: str, label: str) -> str | None:
        """Record a rendered heading and return its anchor, if it gets one.

        heading is the codes-stripped text used for link lookups; label is
        the formatted text shown in the contents listing.
        """
        key = normalize_space(heading)
        if self._assigned is not None:
            anchor = next((a for a in self._assigned.get(key, []) if a not in self._entries), None)
            if anchor is None:
                return None
        else:
            self._count += 1
            anchor = f'{ANCHOR_PREFIX}{self._count}'
        self._by_heading.setdefault(key, anchor)
        self._entries[anchor] = (label, key)
        return anchor

    def lookup(self, heading: str) -> str | None:
        """Anchor for a section name, checking registered and pre-scanned headings."""
        key = normalize_space(heading)
        if key in self._by_heading:
            return self._by_heading[key]
        if self._assigned and self._assigned.get(key):
            return self._assigned[key][0]
        return None

    def entries(self) -> list[tuple[str, str, str]]:
        """(anchor, label, plain) for every registered heading in anchor order."""
        return [
            (anchor, label, plain)
            for anchor, (label, plain) in sorted(self._entries.items(), key=lambda kv: anchor_key(kv[0]))
        ]

    def __len__(self) -> int:
        return len(self._entries)

    def render_contents(self) -> str:
        """Numbered, packed list of links to each heading."""
        if not self._entries:
            return ''
        lines = ['\\h2[Table of Contents]\n\n']
        for anchor, label, _ in self.entries():
            lines.append(f'\\number(packed)[\\link[#{anchor}][{label}]]\n')
        lines.append('\n')
        return ''.join(lines)

    def render_navbar(self) -> str:
        """Links to each heading separated by |, wrapped by visible label length."""
        if not self._entries:
            return ''
        out = ['\\class(navbar)[\n  ']
        length = 0
        for i, (anchor, _, plain) in enumerate(self.entries()):
            label = navbar_label(plain)
            if i:
                if length + len(label) + 3 > NAVBAR_WIDTH:
                    out.append('\n  | ')
                    length = 0
                else:
                    out.append(' | ')
                    length += 3
            out.append(f'\\link[#{anchor}][{sanitize(label)}]')
            length += len(label)
        out.append('\n]\n\n')
        return ''.join(out)


def scan_headings(tokens: list, skip_name: bool = True) -> dict[str, list[str]]:
    """Pre-scan a token stream and assign S<n> anchors to its top-level headings.

    Returns heading text mapped to the anchors of each of its occurrences.
    """
    anchors: dict[str, list[str]] = {}
    count = 0
    start = None
    for i, tok in enumerate(tokens):
        if tok.type != 'head1':
            continue
        if tok.nesting == 1:
            start = i + 1
        elif tok.nesting == -1 and start is not None:
            heading = normalize_space(plain_text(tokens[start:i]))
            start = None
            if skip_name and heading == NAME_HEADING:
                continue
            count += 1
            anchors.setdefault(heading, []).append(f'{ANCHOR_PREFIX}{count}')
    return anchors
