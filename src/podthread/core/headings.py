"""Heading and page header rendering"""

import re


NAME_HEADING = 'NAME'

_NAME_SEP_RE = re.compile(r"\s+-+\s+")


def output_level(pod_level: int) -> int:
    """=head1 renders as \\h2 since \\h1 is the page title; =head4 as \\h5."""
    return pod_level + 1


def render_heading(text: str, level: int, anchor: str | None = None) -> str:
    if anchor:
        return f'\\h{level}(#{anchor})[{text}]\n\n'
    return f'\\h{level}[{text}]\n\n'


def parse_name(text: str) -> tuple[str, str | None]:
    """Split a NAME paragraph of the form 'name - description'."""
    text = text.strip()
    parts = _NAME_SEP_RE.split(text, 1)
    if len(parts) == 2 and parts[0] and parts[1].strip():
        return parts[0], parts[1].strip()
    return text, None


def render_header(
    title: str,
    style: str = '',
    description: str | None = None,
    doc_id: str | None = None,
    ) -> str:
    """Page header: optional \\id, the \\heading directive, title, and subheading."""
    parts = []
    if doc_id:
        parts.append(f'\\id[{doc_id}]\n\n')
    parts.append(f'\\heading[{title}][{style}]\n\n')
    parts.append(f'\\h1[{title}]\n\n')
    if description:
        parts.append(f'\\p(subhead)[({description})]\n\n')
    return ''.join(parts)
