"""Document driver: walks the POD token stream and writes thread"""

import io
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Iterable, Optional, Union

from markdown_it.token import Token

from podthread.core.errors import OutputWriteError, PodSyntaxError
from podthread.core.escapes import plain_escape
from podthread.core.headings import NAME_HEADING, output_level, parse_name, render_header, render_heading
from podthread.core.inline import format_code, format_escape, format_link
from podthread.core.lists import ListStack
from podthread.core.models import CODES, ElementKind, ThreadOptions
from podthread.core.output import OutputSink
from podthread.core.parse import ACCEPT_TARGETS, parse_bytes, parse_file, parse_pod
from podthread.core.sections import SectionRegistry
from podthread.core.text import normalize_space, reformat, sanitize


logger = logging.getLogger(__name__)

SIGNATURE = '\\signature\n'

Source = Union[str, Path, IO, None]
Destination = Union[str, Path, IO, None]


@dataclass
class Frame:
    """Text collected inside one open element."""
    kind:  Optional[ElementKind]
    token: Token
    text:  list[str] = field(default_factory=list)     # sanitized, codes rendered
    plain: list[str] = field(default_factory=list)     # codes stripped

    def formatted(self) -> str:
        return ''.join(self.text)

    def raw(self) -> str:
        return ''.join(self.plain)


@dataclass
class ConversionContext:
    """State for the document being converted, created at Document start."""
    options:     ThreadOptions
    sink:        OutputSink
    lists:       ListStack
    registry:    Optional[SectionRegistry] = None
    source:      str = '<string>'
    doc_id:      Optional[str] = None
    contentless: bool = False
    in_name:     bool = False
    toc_slot:    Optional[list[str]] = None
    stack:       list[Frame] = field(default_factory=list)
    errata:      list[str] = field(default_factory=list)


class ThreadConverter:
    """Converts POD into thread.

    anchors optionally maps top-level heading text to the anchors of its
    occurrences, as returned by ``scan_headings``; without it anchors are
    assigned as headings are reached, and only when contents or navbar are
    requested.
    """

    def __init__(
        self,
        options: Optional[ThreadOptions] = None,
        anchors: Optional[dict[str, list[str]]] = None,
        targets: Iterable[str] = ACCEPT_TARGETS,
        ):
        self.options = options or ThreadOptions()
        self.anchors = anchors
        self.targets = tuple(targets)
        self.ctx: Optional[ConversionContext] = None
        self._closers = {
            ElementKind.head1:    self._end_heading,
            ElementKind.head2:    self._end_heading,
            ElementKind.head3:    self._end_heading,
            ElementKind.head4:    self._end_heading,
            ElementKind.para:     self._end_para,
            ElementKind.verbatim: self._end_verbatim,
            ElementKind.data:     self._end_data,
            ElementKind.item:     self._end_item,
            ElementKind.link:     self._end_link,
        }

    # --- entry points ---

    def convert(self, source: Source = None, destination: Destination = None) -> None:
        """Convert a path or stream (default stdin) to a path or stream (default stdout)."""
        tokens = self._read(source)
        if destination is None:
            self.run(tokens, sys.stdout)
        elif isinstance(destination, (str, Path)):
            try:
                fh = open(destination, 'w', encoding='utf-8')
            except OSError as e:
                raise OutputWriteError(f"Cannot open {destination}: {e}") from e
            with fh:
                self.run(tokens, fh)
        else:
            self.run(tokens, destination)

    def convert_string(self, text: str, source: str = '<string>') -> str:
        """Convert POD text and return the thread output."""
        out = io.StringIO()
        self.run(parse_pod(text, source, self.targets), out)
        return out.getvalue()

    def run(self, tokens: Iterable[Token], destination: IO) -> None:
        """Dispatch every token, write the output, then fail if the POD had errors."""
        for token in tokens:
            self.handle(token)
        ctx = self.ctx
        if ctx is None:
            return
        ctx.sink.flush(destination)
        if ctx.errata:
            for erratum in ctx.errata:
                logger.error("%s", erratum)
            raise PodSyntaxError(ctx.errata)

    def _read(self, source: Source) -> list[Token]:
        if source is None:
            source = sys.stdin
        if isinstance(source, (str, Path)):
            return parse_file(Path(source), self.targets)
        name = str(getattr(source, 'name', '<stream>'))
        data = source.read()
        if isinstance(data, bytes):
            return parse_bytes(data, name, self.targets)
        return parse_pod(data, name, self.targets)

    # --- dispatch ---

    def handle(self, token: Token) -> None:
        if token.nesting == 0:
            if token.type == 'text':
                self._text(token)
            else:
                self._leaf(token)
            return

        kind = ElementKind.lookup(token.type)
        if kind is ElementKind.document:
            if token.nesting == 1:
                self._start_document(token)
            else:
                self._end_document(token)
        elif kind is ElementKind.over:
            if token.nesting == 1:
                self.ctx.lists.over()
            elif not self.ctx.lists.back():
                logger.warning("%s: Unmatched =back", self._where(token))
        elif token.nesting == 1:
            self.ctx.stack.append(Frame(kind, token))
        else:
            frame = self.ctx.stack.pop()
            if kind in CODES:
                self._end_code(frame)
            elif kind in self._closers:
                self._closers[kind](frame)
            else:
                self._end_unknown(frame)

    def _where(self, token: Token) -> str:
        line = token.map[0] + 1 if token.map else 0
        return f"{self.ctx.source}:{line}"

    def _output(self, text: str) -> None:
        self.ctx.sink.write(text)

    def _parent(self) -> Optional[Frame]:
        return self.ctx.stack[-1] if self.ctx.stack else None

    # --- document ---

    def _start_document(self, token: Token) -> None:
        opts = self.options
        sink = OutputSink()
        registry = None
        if opts.contents or opts.navbar or self.anchors is not None:
            registry = SectionRegistry(self.anchors)
        self.ctx = ConversionContext(
            options=opts,
            sink=sink,
            lists=ListStack(sink.write),
            registry=registry,
            source=token.meta.get('source') or '<string>',
            doc_id=opts.id or token.meta.get('id'),
            contentless=bool(token.meta.get('contentless')),
        )
        if self.ctx.contentless:
            return
        if opts.contents or opts.navbar:
            self.ctx.toc_slot = sink.reserve()
        if opts.title:
            self._header(sanitize(opts.title))

    def _end_document(self, token: Token) -> None:
        ctx = self.ctx
        ctx.errata.extend(token.meta.get('errata', []))
        if ctx.contentless:
            return
        ctx.lists.close_all()
        if ctx.toc_slot is not None and ctx.registry is not None:
            if self.options.navbar:
                ctx.toc_slot.append(ctx.registry.render_navbar())
            if self.options.contents:
                ctx.toc_slot.append(ctx.registry.render_contents())
        self._output(SIGNATURE)

    def _header(self, title: str, description: Optional[str] = None) -> None:
        ctx = self.ctx
        doc_id = sanitize(ctx.doc_id) if ctx.doc_id else None
        self._output(render_header(title, sanitize(self.options.style), description, doc_id))
        if self.options.contents or self.options.navbar:
            ctx.toc_slot = ctx.sink.reserve()

    # --- text ---

    def _text(self, token: Token) -> None:
        frame = self._parent()
        if frame is None:
            return
        if frame.kind is ElementKind.data:
            frame.text.append(token.content)
        else:
            frame.text.append(sanitize(token.content))
        frame.plain.append(token.content)

    def _leaf(self, token: Token) -> None:
        frame = self._parent()
        if frame is None:
            return
        if token.type == 'E':
            frame.text.append(format_escape(token.content, self._where(token)))
            frame.plain.append(plain_escape(token.content))
        else:
            frame.text.append(format_code(token.type, sanitize(token.content), self._where(token)))

    # --- blocks ---

    def _end_heading(self, frame: Frame) -> None:
        ctx = self.ctx
        level = int(frame.token.type[-1])
        text = normalize_space(frame.formatted())
        plain = normalize_space(frame.raw())
        ctx.lists.finish_item()
        if level == 1 and plain == NAME_HEADING and not self.options.title:
            ctx.in_name = True
            return
        ctx.in_name = False
        anchor = None
        if level == 1 and ctx.registry is not None:
            anchor = ctx.registry.register(plain, text)
        self._output(render_heading(text, output_level(level), anchor))

    def _end_para(self, frame: Frame) -> None:
        ctx = self.ctx
        text = frame.formatted()
        if not text.strip():
            return
        if ctx.in_name:
            ctx.in_name = False
            title, description = parse_name(normalize_space(text))
            self._header(title, description)
            return
        self._body(reformat(text + '\n'))

    def _end_verbatim(self, frame: Frame) -> None:
        text = frame.formatted().rstrip()
        if not text.strip():
            return
        self._body(f'\\pre\n[{text}]\n\n')

    def _end_data(self, frame: Frame) -> None:
        text = frame.formatted().rstrip('\n')
        if text.strip():
            self._output(text + '\n\n')

    def _body(self, text: str) -> None:
        if self.ctx.lists:
            self.ctx.lists.body(text)
        else:
            self._output(text)

    def _end_item(self, frame: Frame) -> None:
        self.ctx.lists.item(normalize_space(frame.formatted()), normalize_space(frame.raw()))

    # --- inline ---

    def _end_code(self, frame: Frame) -> None:
        parent = self._parent()
        if parent is None:
            return
        parent.text.append(format_code(frame.token.type, frame.formatted(), self._where(frame.token)))
        parent.plain.extend(frame.plain)

    def _end_link(self, frame: Frame) -> None:
        parent = self._parent()
        if parent is None:
            return
        parent.text.append(format_link(frame.formatted(), frame.raw(), frame.token.meta, self.ctx.registry))
        parent.plain.extend(frame.plain)

    def _end_unknown(self, frame: Frame) -> None:
        name = frame.token.type
        if len(name) == 1 and name.isupper():
            self._end_code(frame)
            return
        text = frame.raw().strip()
        logger.warning("%s: Unknown command paragraph: =%s%s",
                       self._where(frame.token), name, f" {text}" if text else "")
