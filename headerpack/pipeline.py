#!/usr/bin/env python3
"""
The packing run: discover, link, order, assemble, write.

Each phase needs the previous one to have finished completely, so they run
strictly in sequence. Categorized failures come back as a PackResult rather
than an exception; anything unexpected propagates to the caller.
"""

import logging
import time
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field

from headerpack.assembler import render, write_output
from headerpack.config import PackConfig
from headerpack.console import Console
from headerpack.errors import FailureKind, HeaderpackError
from headerpack.graph import build_graph
from headerpack.ordering import order_graph

logger = logging.getLogger(__name__)


class PackResult(BaseModel):
    """Outcome of a packing run."""

    ok: bool
    failure: FailureKind | None = None
    message: str = ""
    output_path: Path | None = None
    files: list[str] = Field(default_factory=list)  # emission order, display names
    external_includes: list[str] = Field(default_factory=list)
    elapsed_ms: int = 0

    @classmethod
    def failed(cls, error: HeaderpackError, elapsed_ms: int = 0) -> "PackResult":
        return cls(ok=False, failure=error.kind, message=error.message, elapsed_ms=elapsed_ms)


def pack(config: PackConfig, console: Console | None = None, dry_run: bool = False) -> PackResult:
    """Merge the include tree rooted at ``config.include`` into one header."""
    console = console or Console()
    started = time.monotonic()

    def elapsed() -> int:
        return int((time.monotonic() - started) * 1000 + 0.999)

    try:
        config.check_paths()

        graph = build_graph(config.include_path(), config.base_dir)
        console.detail(
            f"Found {len(graph)} files: "
            + ", ".join(f'"{node.relative_name}"' for node in graph)
        )

        files = order_graph(graph)
        console.detail("Ordering files complete")

        output_path = config.output_path()
        if not dry_run:
            text = render(
                files,
                graph.external_includes,
                line_terminator=config.line_terminator,
                disclaimer=config.disclaimer_path(),
                timestamp=datetime.now(timezone.utc) if config.timestamp else None,
            )
            write_output(output_path, text)
    except HeaderpackError as e:
        logger.debug("Packing failed (%s): %s", e.kind.value, e.message)
        return PackResult.failed(e, elapsed())

    return PackResult(
        ok=True,
        output_path=output_path.resolve(),
        files=[node.relative_name for node in files],
        external_includes=graph.external_includes,
        elapsed_ms=elapsed(),
    )
