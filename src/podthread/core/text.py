"""Macro-safe escaping and paragraph rewrapping for thread output"""

import re


WRAP_WIDTH = 74

_META_RE = re.compile(r'[\\\[\]]')
_TRAILING_WS_RE = re.compile(r'[ \t]+$', re.MULTILINE)
_SPACE_RUN_RE = re.compile(r'   +')


def _escape_meta(match: re.Match) -> str:
    char = match.group(0)
    if char == '\\':
        return '\\\\'
    return f'\\entity[{ord(char)}]'


def sanitize(text: str) -> str:
    """Double backslashes and turn literal brackets into \\entity[] escapes."""
    return _META_RE.sub(_escape_meta, text)


def normalize_space(text: str) -> str:
    """Collapse all whitespace runs to single spaces and trim the ends."""
    return ' '.join(text.split())


def reformat(text: str, width: int = WRAP_WIDTH) -> str:
    """Rewrap a paragraph to width columns, ending in a blank line.

    Sentence-ending periods at the end of a source line keep two spaces once
    lines are joined. A word longer than the width is never split; the line
    overruns until the next whitespace instead. Blank input yields ''.
    """
    text = _TRAILING_WS_RE.sub('', text)
    text = text.replace('.\n', '. \n')
    text = text.replace('\n', ' ')
    text = _SPACE_RUN_RE.sub('  ', text).lstrip()
    if not text.strip():
        return ''

    fits = re.compile(r'(.{0,%d})\s+' % width)
    overrun = re.compile(r'(\S+)\s+')
    lines = []
    while len(text) > width:
        m = fits.match(text) or overrun.match(text)
        if not m:
            break
        lines.append(m.group(1).rstrip())
        text = text[m.end():]
    lines.append(text)
    return '\n'.join(lines).rstrip() + '\n\n'
