"""Formatting codes, escapes, and links rendered as thread macros"""

import logging
import re

from podthread.core.escapes import is_html_entity, literal_escape
from podthread.core.sections import SectionRegistry
from podthread.core.text import normalize_space, sanitize


logger = logging.getLogger(__name__)

CODE_MACROS: dict[str, str] = {
    'B': '\\bold[{}]',
    'C': '\\code[{}]',
    'I': '\\italic[{}]',
    'F': '\\italic(file)[{}]',
}
INDEX_CODES = {'X', 'Z'}

_QUOTED_RE = re.compile(r'^"(.*)"$', re.DOTALL)


def format_code(code: str, text: str, where: str = '') -> str:
    """Wrap already formatted text in the macro for a formatting code."""
    if code in INDEX_CODES:
        return ''
    if code == 'S':
        return text
    if not text:
        return ''
    template = CODE_MACROS.get(code)
    if template is not None:
        return template.format(text)
    logger.warning("%s: Unknown formatting code: %s<%s>", where, code, text)
    return f'{code}<{text}>'


def format_escape(name: str, where: str = '') -> str:
    """Resolve E<name> to sanitized text, an \\entity[] macro, or the raw code."""
    literal = literal_escape(name)
    if literal is not None:
        return sanitize(literal)
    if is_html_entity(name):
        return f'\\entity[{name.strip()}]'
    logger.warning("%s: Unknown escape: E<%s>", where, name)
    return sanitize(f'E<{name}>')


def format_link(text: str, plain: str, meta: dict, registry: SectionRegistry | None = None) -> str:
    """Render an L<> code.

    URLs become \\link macros, bare ones wrapped in angle brackets. Links to a
    section of this document resolve through the registry. Everything else
    falls back to the display text without a hyperlink.
    """
    link_type = meta.get('type')
    to = meta.get('to')
    if link_type == 'url' and to:
        url = sanitize(to)
        if normalize_space(plain) == to:
            return f'<\\link[{url}][{url}]>'
        return f'\\link[{url}][{text}]'

    section = meta.get('section')
    if link_type == 'pod' and not to and section and registry is not None:
        anchor = registry.lookup(section)
        if anchor:
            m = _QUOTED_RE.match(text.strip())
            label = m.group(1) if m else text
            return f'\\link[#{anchor}][{label}]'
    return text
