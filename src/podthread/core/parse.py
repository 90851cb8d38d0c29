"""POD discovery, decoding, and tokenization into a flat markdown-it token stream"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from markdown_it.token import Token

from podthread.core.escapes import plain_escape


logger = logging.getLogger(__name__)

POD_EXTENSIONS = {'.pod', '.pm', '.pl'}
ACCEPT_TARGETS = ('thread',)

TAGS: dict[str, str] = {
    'head1': 'h1', 'head2': 'h2', 'head3': 'h3', 'head4': 'h4',
    'Para': 'p', 'Verbatim': 'pre', 'over': 'ul', 'item': 'li',
    'B': 'b', 'C': 'code', 'I': 'i', 'F': 'i', 'L': 'a', 'S': 'span',
}
SELF_CLOSING_CODES = {'E', 'X', 'Z'}

_POD_START_RE = re.compile(r'^=[a-zA-Z]')
_COMMAND_RE = re.compile(r'^=([a-zA-Z]\w*)[ \t]*\n?(.*)$', re.DOTALL)
_ID_RE = re.compile(r'(\$Id:[^\n]*?\$)')
_ENCODING_RE = re.compile(rb'^=encoding[ \t]+(\S+)', re.MULTILINE)
_CODE_START_RE = re.compile(r'([A-Z])<(?:(<+)(\s+))?')
_SINGLE_CLOSE_RE = re.compile(r'>')
_URL_RE = re.compile(r'^[a-zA-Z][-+.\w]*:[^:\s]\S*$')
_MAN_RE = re.compile(r'^[^/|"\s]+\(\S*\)$')
_QUOTED_RE = re.compile(r'^"(.*)"$', re.DOTALL)


@dataclass
class PodLink:
    """The parts of an L<> code."""
    type:     str                  # url, pod, or man
    text:     str                  # display text, explicit or generated
    to:       str | None = None
    section:  str | None = None
    explicit: bool = False


@dataclass
class _Code:
    letter:   str
    raw:      str
    line:     int
    children: list = field(default_factory=list)


def _link_split(raw: str) -> int:
    """Index of the | separating display text from target, ignoring nested codes."""
    depth = 0
    i = 0
    while i < len(raw):
        if raw[i].isupper() and raw[i + 1:i + 2] == '<':
            depth += 1
            i += 2
            continue
        if raw[i] == '>' and depth:
            depth -= 1
        elif raw[i] == '|' and not depth:
            return i
        i += 1
    return -1


def parse_link(raw: str) -> PodLink:
    """Split L<> contents into display text, target page, and section."""
    text = None
    target = raw
    split = _link_split(raw)
    if split >= 0:
        text = ' '.join(raw[:split].split())
        target = raw[split + 1:]
    target = ' '.join(target.split())

    if _URL_RE.match(target):
        return PodLink('url', text or target, to=target, explicit=text is not None)

    name, section = target, None
    if '/' in target:
        name, section = target.split('/', 1)
    elif target.startswith('"') or ' ' in target:
        name, section = '', target
    if section is not None:
        m = _QUOTED_RE.match(section.strip())
        section = m.group(1) if m else section.strip()
    name = name.strip() or None

    link_type = 'man' if name and _MAN_RE.match(name) else 'pod'
    if text is None:
        if name and section:
            text = f'"{section}" in {name}'
        elif section:
            text = f'"{section}"'
        else:
            text = name or ''
    return PodLink(link_type, text, to=name, section=section or None, explicit=split >= 0)


def plain_text(tokens: Iterable[Token]) -> str:
    """Text of a token run with formatting codes stripped and escapes resolved."""
    parts = []
    for tok in tokens:
        if tok.type == 'text':
            parts.append(tok.content)
        elif tok.type == 'E':
            parts.append(plain_escape(tok.content))
    return ''.join(parts)


class PodReader:
    """Turns POD source into element start, text, and end tokens.

    Paragraph commands become open/close pairs around inline tokens; =over
    opens and =back closes an ``over`` element. Problems a POD formatter
    treats as errors are collected as errata on the closing Document token.
    """

    def __init__(self, source: str = '<string>', targets: Iterable[str] = ACCEPT_TARGETS):
        self.source = source
        self.targets = set(targets)
        self.tokens: list[Token] = []
        self.errata: list[str] = []
        self.doc_id: str | None = None
        self._overs: list[int] = []
        self._regions: list[tuple[str, str, int]] = []    # (target, mode, line)
        self._verbatim: Token | None = None
        self._verbatim_end = 0

    def _erratum(self, line: int, message: str) -> None:
        self.errata.append(f"{self.source}:{line + 1}: {message}")

    def _token(self, type_: str, nesting: int, line: int, **kwargs) -> Token:
        return Token(type_, TAGS.get(type_, ''), nesting, map=[line, line + 1], **kwargs)

    # --- paragraphs ---

    def _paragraphs(self, text: str) -> list[tuple[str, int]]:
        """Split source into (paragraph, first line) pairs, skipping non-POD text."""
        paragraphs: list[tuple[str, int]] = []
        in_pod = False
        buf: list[str] = []
        start = 0

        def close() -> bool:
            para = '\n'.join(buf)
            buf.clear()
            if para.startswith('=cut') and (len(para) == 4 or para[4].isspace()):
                return False
            paragraphs.append((para, start))
            return True

        for lineno, raw in enumerate(text.splitlines()):
            line = raw.expandtabs(8)
            if self.doc_id is None:
                m = _ID_RE.search(line)
                if m:
                    self.doc_id = m.group(1)
            if not in_pod:
                if not _POD_START_RE.match(line):
                    continue
                in_pod = True
            if line.strip():
                if not buf:
                    start = lineno
                buf.append(line)
            elif buf:
                in_pod = close()
        if buf and in_pod:
            close()
        return paragraphs

    def _region_mode(self) -> str:
        return self._regions[-1][1] if self._regions else 'pod'

    def feed(self, text: str) -> None:
        for para, line in self._paragraphs(text):
            m = _COMMAND_RE.match(para)
            if m:
                self._verbatim = None
                self._command(m.group(1), m.group(2), line)
                continue
            mode = self._region_mode()
            if mode == 'skip':
                continue
            if mode == 'data':
                self._block('Data', line, content=para)
            elif para[0] in ' \t':
                self._verbatim_block(para, line)
            else:
                self._verbatim = None
                self._block('Para', line, inline=para)

    def _block(self, type_: str, line: int, inline: str | None = None, content: str | None = None) -> None:
        self.tokens.append(self._token(type_, 1, line, block=True))
        if inline is not None:
            self.tokens.extend(self.inline_tokens(inline, line))
        if content is not None:
            self.tokens.append(self._token('text', 0, line, content=content))
        self.tokens.append(self._token(type_, -1, line, block=True))

    def _verbatim_block(self, para: str, line: int) -> None:
        """Consecutive verbatim paragraphs merge, keeping the blank lines between them."""
        end = line + para.count('\n')
        if self._verbatim is not None:
            gap = '\n' * (line - self._verbatim_end)
            self._verbatim.content += gap + para
        else:
            self._block('Verbatim', line, content=para)
            self._verbatim = self.tokens[-2]
        self._verbatim_end = end

    # --- commands ---

    def _command(self, name: str, arg: str, line: int) -> None:
        mode = self._region_mode()
        if name == 'begin':
            self._begin(arg, line, mode)
        elif name == 'end':
            self._end(arg, line)
        elif mode != 'pod' or name in ('pod', 'encoding'):
            return
        elif name == 'for':
            self._for(arg, line)
        elif name in ('head1', 'head2', 'head3', 'head4'):
            self._block(name, line, inline=arg.rstrip())
        elif name == 'over':
            self._overs.append(line)
            self.tokens.append(self._token('over', 1, line, block=True, meta={'indent': arg.strip() or '4'}))
        elif name == 'back':
            if self._overs:
                self._overs.pop()
            self.tokens.append(self._token('over', -1, line, block=True))
        elif name == 'item':
            if not self._overs:
                self._erratum(line, "=item outside of any =over")
            self._block('item', line, inline=arg.rstrip())
        else:
            self._block(name, line, content=arg.rstrip())

    def _begin(self, arg: str, line: int, mode: str) -> None:
        target = arg.split()[0] if arg.split() else ''
        if not target:
            self._erratum(line, "=begin without a target")
        if mode != 'pod':
            self._regions.append((target, 'skip', line))
        elif target.startswith(':') and target[1:] in self.targets:
            self._regions.append((target, 'pod', line))
        elif target in self.targets:
            self._regions.append((target, 'data', line))
        else:
            self._regions.append((target, 'skip', line))

    def _end(self, arg: str, line: int) -> None:
        target = arg.split()[0] if arg.split() else ''
        if not self._regions:
            self._erratum(line, f"=end {target} without matching =begin" if target else "=end without matching =begin")
            return
        begun = self._regions.pop()[0]
        if target and target != begun:
            self._erratum(line, f"=end {target} doesn't match =begin {begun}")

    def _for(self, arg: str, line: int) -> None:
        parts = arg.split(None, 1)
        if not parts:
            self._erratum(line, "=for without a target")
            return
        target = parts[0]
        body = arg[arg.index(target) + len(target):].lstrip(' \t')
        if body.startswith('\n'):
            body = body[1:]
        if target in self.targets:
            self._block('Data', line, content=body.rstrip('\n'))
        elif target.startswith(':') and target[1:] in self.targets and body.strip():
            self._block('Para', line, inline=body)

    # --- formatting codes ---

    def _scan(self, text: str, pos: int, closer: re.Pattern | None, line: int, report: bool) -> tuple[list, int, int, bool]:
        """Parse codes from pos until closer; returns (nodes, content end, next pos, closed)."""
        nodes: list = []
        start = pos
        while pos < len(text):
            if closer is not None:
                m = closer.match(text, pos)
                if m:
                    if start < pos:
                        nodes.append(text[start:pos])
                    return nodes, pos, m.end(), True
            m = _CODE_START_RE.match(text, pos)
            if m is None:
                pos += 1
                continue
            if start < pos:
                nodes.append(text[start:pos])
            letter = m.group(1)
            if m.group(2):
                inner = re.compile(r'\s+' + '>' * (len(m.group(2)) + 1))
            else:
                inner = _SINGLE_CLOSE_RE
            code_line = line + text.count('\n', 0, m.start())
            children, end, after, closed = self._scan(text, m.end(), inner, line, report)
            if not closed and report:
                self._erratum(code_line, f"Unterminated {letter}<> sequence")
            nodes.append(_Code(letter, text[m.end():end], code_line, children))
            pos = start = after
        if start < pos:
            nodes.append(text[start:pos])
        return nodes, pos, pos, closer is None

    def inline_tokens(self, text: str, line: int, report: bool = True) -> list[Token]:
        """Tokens for a paragraph's text with its formatting codes."""
        nodes = self._scan(text, 0, None, line, report)[0]
        out: list[Token] = []
        self._flatten(nodes, line, out)
        return out

    def _flatten(self, nodes: list, line: int, out: list[Token]) -> None:
        for node in nodes:
            if isinstance(node, str):
                out.append(self._token('text', 0, line, content=node))
            elif node.letter in SELF_CLOSING_CODES:
                out.append(self._token(node.letter, 0, node.line, content=node.raw))
            elif node.letter == 'L':
                link = parse_link(node.raw)
                section = None
                if link.section:
                    section = plain_text(self.inline_tokens(link.section, node.line, report=False))
                meta = {'type': link.type, 'to': link.to, 'section': section, 'explicit': link.explicit}
                out.append(self._token('L', 1, node.line, meta=meta))
                out.extend(self.inline_tokens(link.text, node.line, report=False))
                out.append(self._token('L', -1, node.line))
            else:
                out.append(self._token(node.letter, 1, node.line))
                self._flatten(node.children, node.line, out)
                out.append(self._token(node.letter, -1, node.line))

    # --- document ---

    def finish(self, last_line: int = 0) -> list[Token]:
        """Close anything left open and wrap the stream in Document tokens."""
        for line in reversed(self._overs):
            self._erratum(line, "=over without closing =back")
            self.tokens.append(self._token('over', -1, last_line, block=True))
        self._overs.clear()
        for target, _, line in reversed(self._regions):
            self._erratum(line, f"=begin {target} without matching =end")
        self._regions.clear()

        meta = {'source': self.source, 'contentless': not self.tokens, 'id': self.doc_id}
        start = self._token('Document', 1, 0, block=True, meta=meta)
        end = self._token('Document', -1, last_line, block=True, meta={'errata': list(self.errata)})
        return [start, *self.tokens, end]


def decode_source(data: bytes) -> tuple[str, list[str]]:
    """Decode POD bytes using its =encoding line, else UTF-8 falling back to CP1252."""
    problems = []
    m = _ENCODING_RE.search(data)
    if m:
        encoding = m.group(1).decode('ascii', 'replace')
        try:
            return data.decode(encoding), problems
        except LookupError:
            problems.append(f"Unknown encoding {encoding}")
        except UnicodeDecodeError as e:
            problems.append(f"Cannot decode as {encoding}: {e}")
    try:
        return data.decode('utf-8-sig'), problems
    except UnicodeDecodeError:
        logger.debug("Input is not UTF-8, decoding as CP1252")
        return data.decode('cp1252', errors='replace'), problems


def parse_pod(text: str, source: str = '<string>', targets: Iterable[str] = ACCEPT_TARGETS) -> list[Token]:
    """Tokenize POD text into a Document-wrapped token stream."""
    reader = PodReader(source, targets)
    reader.feed(text)
    return reader.finish(max(text.count('\n') - 1, 0))


def parse_bytes(data: bytes, source: str = '<bytes>', targets: Iterable[str] = ACCEPT_TARGETS) -> list[Token]:
    text, problems = decode_source(data)
    reader = PodReader(source, targets)
    reader.errata.extend(f"{source}:1: {p}" for p in problems)
    reader.feed(text)
    return reader.finish(max(text.count('\n') - 1, 0))


def parse_file(path: Path, targets: Iterable[str] = ACCEPT_TARGETS) -> list[Token]:
    """Read and tokenize a single POD file."""
    return parse_bytes(Path(path).read_bytes(), str(path), targets)


def discover_files(path: Path) -> list[Path]:
    """Return sorted .pod/.pm/.pl files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in POD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in POD_EXTENSIONS)
