#!/usr/bin/env python3

from pathlib import Path

import pytest


@pytest.fixture
def write_tree(tmp_path):
    """Write ``{relative path: content}`` under tmp_path and return the root dir."""

    def write(files: dict[str, str]) -> Path:
        for name, content in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return tmp_path

    return write
