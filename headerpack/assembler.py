#!/usr/bin/env python3
"""
Single header assembly and atomic output writing.
"""

import logging
import os
import stat
import tempfile
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from headerpack import __version__
from headerpack.graph import FileNode
from headerpack.scanner import ONCE_DIRECTIVE, TEXT_ERRORS, filter_lines, read_lines

logger = logging.getLogger(__name__)


def banner(timestamp: datetime | None = None) -> str:
    text = f"// This file was automatically generated by headerpack v{__version__}"
    if timestamp is not None:
        text += f" at {timestamp.astimezone(timezone.utc).strftime('%Y-%m-%d %H:%M:%SZ')}"
    return text


def file_marker(node: FileNode) -> str:
    return f"// headerpack: {node.relative_name}"


def assemble_lines(
    files: Iterable[FileNode],
    external_includes: Iterable[str],
    *,
    disclaimer: Path | None = None,
    timestamp: datetime | None = None,
) -> list[str]:
    """Build the output lines for files already in emission order."""
    lines = [ONCE_DIRECTIVE]

    if disclaimer is not None:
        # Copied line by line so the output gets consistent line endings
        lines.extend(read_lines(disclaimer))
    lines.append(banner(timestamp))
    lines.append("")

    # External includes go first so no file body can shadow them
    lines.append("// External includes")
    lines.append("")
    lines.extend(f"#include <{include}>" for include in external_includes)
    lines.append("")

    for node in files:
        logger.debug('Writing "%s"', node.relative_name)
        lines.append(file_marker(node))
        lines.append("")
        lines.extend(filter_lines(read_lines(node.path)))
        lines.append("")

    return lines


def render(
    files: Iterable[FileNode],
    external_includes: Iterable[str],
    *,
    line_terminator: str = "\n",
    disclaimer: Path | None = None,
    timestamp: datetime | None = None,
) -> str:
    lines = assemble_lines(
        files, external_includes, disclaimer=disclaimer, timestamp=timestamp
    )
    return "".join(line + line_terminator for line in lines)


def output_mode(path: Path) -> int:
    """Keep an existing file's permissions, otherwise honour the umask."""
    if path.exists():
        return stat.S_IMODE(path.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_output(path: Path, text: str) -> None:
    """Write text to a temp file beside ``path`` then move it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = output_mode(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", errors=TEXT_ERRORS, newline="") as f:
            f.write(text)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info('Wrote "%s"', path)
