"""Named and numeric character escapes for E<> formatting codes"""

import re
from types import MappingProxyType

from markdown_it.common.entities import entities as HTML_ENTITIES


# Latin-1 names recognized by POD, mapped to the literal characters they stand
# for. Anything not here but known to HTML is left for the renderer.
ESCAPES = MappingProxyType({
    'amp':      '&',        # ampersand
    'apos':     "'",        # apostrophe
    'lt':       '<',        # left chevron, less-than
    'gt':       '>',        # right chevron, greater-than
    'quot':     '"',        # double quote
    'sol':      '/',        # solidus (forward slash)
    'verbar':   '|',        # vertical bar

    'Aacute':   '\xC1',  'aacute':   '\xE1',
    'Acirc':    '\xC2',  'acirc':    '\xE2',
    'AElig':    '\xC6',  'aelig':    '\xE6',
    'Agrave':   '\xC0',  'agrave':   '\xE0',
    'Aring':    '\xC5',  'aring':    '\xE5',
    'Atilde':   '\xC3',  'atilde':   '\xE3',
    'Auml':     '\xC4',  'auml':     '\xE4',
    'Ccedil':   '\xC7',  'ccedil':   '\xE7',
    'Eacute':   '\xC9',  'eacute':   '\xE9',
    'Ecirc':    '\xCA',  'ecirc':    '\xEA',
    'Egrave':   '\xC8',  'egrave':   '\xE8',
    'ETH':      '\xD0',  'eth':      '\xF0',
    'Euml':     '\xCB',  'euml':     '\xEB',
    'Iacute':   '\xCD',  'iacute':   '\xED',
    'Icirc':    '\xCE',  'icirc':    '\xEE',
    'Igrave':   '\xCC',  'igrave':   '\xEC',
    'Iuml':     '\xCF',  'iuml':     '\xEF',
    'Ntilde':   '\xD1',  'ntilde':   '\xF1',
    'Oacute':   '\xD3',  'oacute':   '\xF3',
    'Ocirc':    '\xD4',  'ocirc':    '\xF4',
    'Ograve':   '\xD2',  'ograve':   '\xF2',
    'Oslash':   '\xD8',  'oslash':   '\xF8',
    'Otilde':   '\xD5',  'otilde':   '\xF5',
    'Ouml':     '\xD6',  'ouml':     '\xF6',
    'szlig':    '\xDF',
    'THORN':    '\xDE',  'thorn':    '\xFE',
    'Uacute':   '\xDA',  'uacute':   '\xFA',
    'Ucirc':    '\xDB',  'ucirc':    '\xFB',
    'Ugrave':   '\xD9',  'ugrave':   '\xF9',
    'Uuml':     '\xDC',  'uuml':     '\xFC',
    'Yacute':   '\xDD',  'yacute':   '\xFD',
    'yuml':     '\xFF',

    'laquo':    '\xAB',     # left pointing double angle quotation mark
    'lchevron': '\xAB',     # synonym kept for older documents
    'raquo':    '\xBB',     # right pointing double angle quotation mark
    'rchevron': '\xBB',

    'iexcl':    '\xA1',  'cent':     '\xA2',  'pound':    '\xA3',
    'curren':   '\xA4',  'yen':      '\xA5',  'brvbar':   '\xA6',
    'sect':     '\xA7',  'uml':      '\xA8',  'copy':     '\xA9',
    'ordf':     '\xAA',  'not':      '\xAC',  'reg':      '\xAE',
    'macr':     '\xAF',  'deg':      '\xB0',  'plusmn':   '\xB1',
    'sup2':     '\xB2',  'sup3':     '\xB3',  'acute':    '\xB4',
    'micro':    '\xB5',  'para':     '\xB6',  'middot':   '\xB7',
    'cedil':    '\xB8',  'sup1':     '\xB9',  'ordm':     '\xBA',
    'frac14':   '\xBC',  'frac12':   '\xBD',  'frac34':   '\xBE',
    'iquest':   '\xBF',  'times':    '\xD7',  'divide':   '\xF7',

    'shy':      '',         # soft hyphen, dropped
    'nbsp':     ' ',
})

NUMERIC_RE = re.compile(r'^(?:0[xX][0-9a-fA-F]+|0[0-7]*|[1-9]\d*)$')


def numeric_escape(name: str) -> str | None:
    """Return the character for a decimal, 0x-hex, or 0-octal code point, else None.

    NUL is never produced; E<0> is left for the caller to report.
    """
    if not NUMERIC_RE.match(name):
        return None
    if name[:2].lower() == '0x':
        code = int(name[2:], 16)
    elif name.startswith('0') and len(name) > 1:
        code = int(name[1:], 8)
    else:
        code = int(name)
    if code == 0:
        return None
    try:
        return chr(code)
    except (ValueError, OverflowError):
        return None


def literal_escape(name: str) -> str | None:
    """Return the literal text for an escape name, or None if it has no literal form."""
    name = name.strip()
    char = numeric_escape(name)
    if char is not None:
        return char
    return ESCAPES.get(name)


def is_html_entity(name: str) -> bool:
    """True when the renderer can resolve name as an HTML entity on its own."""
    return name.strip() in HTML_ENTITIES


def plain_escape(name: str) -> str:
    """Best plain-text rendering of an escape, used for link and anchor matching."""
    literal = literal_escape(name)
    if literal is not None:
        return literal
    return HTML_ENTITIES.get(name.strip(), f'E<{name}>')
