"""Output sink that holds back trailing blank lines until the next write"""

import io
import re
from typing import IO

from podthread.core.errors import OutputWriteError


_CLOSE_RE = re.compile(r'\]\s*\n')


class OutputSink:
    """Collects thread output for one document.

    Blank lines at the end of a fragment are withheld so that a following
    ``]`` closing an item block lands directly after the item text, with the
    blank line after it. Slots reserved with ``reserve()`` can be filled once
    the whole document has been seen (contents and navbar).
    """

    def __init__(self):
        self._parts: list = []
        self._space = ''

    def write(self, text: str) -> None:
        if self._space:
            m = _CLOSE_RE.match(text)
            if m:
                self._parts.append(']\n')
                text = text[m.end():]
            self._parts.append(self._space)
            self._space = ''
        stripped = text.rstrip('\n')
        if len(text) - len(stripped) >= 2:
            self._space = text[len(stripped) + 1:]
            text = stripped + '\n'
        if text:
            self._parts.append(text)

    def reserve(self) -> list[str]:
        """Return a slot at the current position whose contents are emitted on flush."""
        if self._space:
            self._parts.append(self._space)
            self._space = ''
        slot: list[str] = []
        self._parts.append(slot)
        return slot

    def getvalue(self) -> str:
        """Everything written so far, including withheld whitespace."""
        chunks = []
        for part in self._parts:
            chunks.extend(part if isinstance(part, list) else [part])
        return ''.join(chunks) + self._space

    def flush(self, destination: IO) -> None:
        """Write the collected output to a text or binary stream."""
        data = self.getvalue()
        try:
            if isinstance(destination, (io.RawIOBase, io.BufferedIOBase)):
                destination.write(data.encode('utf-8'))
            else:
                destination.write(data)
            destination.flush()
        except (OSError, ValueError) as e:
            raise OutputWriteError(f"Cannot write output: {e}") from e
