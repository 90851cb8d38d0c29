"""Pipeline step functions: single-file and directory conversion"""

import logging
from pathlib import Path

from podthread.core.converter import ThreadConverter
from podthread.core.models import ThreadOptions
from podthread.core.parse import ACCEPT_TARGETS, discover_files, parse_file
from podthread.core.sections import scan_headings


logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = '.th'


def prescan_anchors(path: Path, options: ThreadOptions, targets: tuple[str, ...]) -> dict[str, list[str]]:
    """Heading anchors from a first pass over path, so links can point forward."""
    tokens = parse_file(path, targets)
    return scan_headings(tokens, skip_name=not options.title)


def convert_file(
    src: Path,
    dest: Path,
    options: ThreadOptions,
    targets: tuple[str, ...] = ACCEPT_TARGETS,
    prescan: bool = False,
    ) -> Path:
    """Convert one POD file to dest, creating parent directories as needed."""
    anchors = prescan_anchors(src, options, targets) if prescan else None
    dest.parent.mkdir(parents=True, exist_ok=True)
    ThreadConverter(options, anchors=anchors, targets=targets).convert(src, dest)
    return dest


def run_convert(
    path: str,
    out_dir: Path,
    options: ThreadOptions,
    targets: tuple[str, ...] = ACCEPT_TARGETS,
    prescan: bool = False,
    ) -> list[tuple[Path, Path]]:
    """Convert a file or every POD file under a directory into out_dir.

    Output paths mirror the source tree with a .th suffix. Returns
    (source, output) pairs.
    """
    root = Path(path)
    results = []
    for p in discover_files(root):
        rel = p.relative_to(root) if root.is_dir() else Path(p.name)
        dest = out_dir / rel.with_suffix(OUTPUT_SUFFIX)
        try:
            convert_file(p, dest, options, targets, prescan)
        except Exception as e:
            raise RuntimeError(f"Failed to convert {p}: {e}") from e
        logger.debug("Converted %s -> %s", p, dest)
        results.append((p, dest))
    return results
