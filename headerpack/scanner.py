#!/usr/bin/env python3
"""
Include directive scanning.

Only lines beginning with the directive at column 0 count. Indented
directives (for example inside an ``#if`` block) are left alone.
"""

import re
from collections.abc import Iterable, Iterator
from pathlib import Path

from pydantic import BaseModel, Field

INCLUDE_DIRECTIVE = "#include"
ONCE_DIRECTIVE = "#pragma once"

STRIPPED_DIRECTIVES = (INCLUDE_DIRECTIVE, ONCE_DIRECTIVE)

# Only CR, LF and CRLF end a line; form feeds and other separators stay in it
LINE_BREAK = re.compile(r"\r\n|\r|\n")

# Undecodable bytes survive the round trip to the output unchanged
TEXT_ERRORS = "surrogateescape"


class ScanResult(BaseModel):
    """Includes declared by one file."""

    external_includes: list[str] = Field(default_factory=list)  # <vector>, <stdio.h>
    internal_includes: list[Path] = Field(default_factory=list)  # canonical absolute paths


def split_lines(text: str) -> list[str]:
    """Split on physical line breaks, ignoring one trailing terminator."""
    lines = LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def read_lines(path: Path) -> list[str]:
    """Read a text file as UTF-8 lines without their terminators."""
    return split_lines(path.read_text(encoding="utf-8-sig", errors=TEXT_ERRORS))


def resolve_internal(include_name: str, including_file: Path) -> Path:
    return (including_file.parent / include_name).resolve()


def scan_lines(lines: Iterable[str], file_path: Path) -> ScanResult:
    """Extract external and internal includes from the lines of ``file_path``."""
    result = ScanResult()
    for line in lines:
        if not line.startswith(INCLUDE_DIRECTIVE):
            continue

        include_name = line[len(INCLUDE_DIRECTIVE) :].strip()
        if include_name.startswith("<"):
            result.external_includes.append(include_name.strip("<>"))
        elif include_name.startswith('"'):
            result.internal_includes.append(
                resolve_internal(include_name.strip('"'), file_path)
            )
    return result


def scan_text(text: str, file_path: Path) -> ScanResult:
    return scan_lines(split_lines(text), file_path)


def scan_file(path: Path) -> ScanResult:
    return scan_lines(read_lines(path), path)


def is_stripped_line(line: str) -> bool:
    """True for lines the assembled output must not contain."""
    return line.startswith(STRIPPED_DIRECTIVES)


def filter_lines(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        if not is_stripped_line(line):
            yield line
