#!/usr/bin/env python3

import os
import stat
from datetime import datetime, timezone
from pathlib import Path

import pytest

from headerpack import __version__
from headerpack.assembler import banner, render, write_output
from headerpack.graph import build_graph
from headerpack.ordering import order_graph


@pytest.fixture
def packed_tree(write_tree):
    root = write_tree(
        {
            "lib.h": (
                "#pragma once\n"
                "#include <vector>\n"
                '#include "types.h"\n'
                "inline int answer() { return TYPE_SIZE; }\n"
            ),
            "types.h": (
                "#pragma once\n"
                "#include <cstdint>\n"
                "#include <vector>\n"
                "#define TYPE_SIZE 42\n"
                "#if defined(EXTRA)\n"
                '  #include "extra.h"\n'
                "#endif\n"
            ),
        }
    )
    graph = build_graph(Path("lib.h"), root)
    return graph, order_graph(graph)


def test_render_layout(packed_tree):
    graph, files = packed_tree
    text = render(files, graph.external_includes)

    assert text.splitlines() == [
        "#pragma once",
        banner(),
        "",
        "// External includes",
        "",
        "#include <vector>",
        "#include <cstdint>",
        "",
        "// headerpack: types.h",
        "",
        "#define TYPE_SIZE 42",
        "#if defined(EXTRA)",
        '  #include "extra.h"',
        "#endif",
        "",
        "// headerpack: lib.h",
        "",
        "inline int answer() { return TYPE_SIZE; }",
        "",
    ]


def test_external_include_appears_once(packed_tree):
    graph, files = packed_tree
    text = render(files, graph.external_includes)

    assert text.count("#include <vector>") == 1


def test_only_one_pragma_once(packed_tree):
    graph, files = packed_tree
    text = render(files, graph.external_includes)

    assert text.count("#pragma once") == 1
    assert text.startswith("#pragma once\n")


def test_line_terminator(packed_tree):
    graph, files = packed_tree
    text = render(files, graph.external_includes, line_terminator="\r\n")

    assert text.endswith("\r\n")
    assert "\n" not in text.replace("\r\n", "")


def test_crlf_input_normalized(write_tree):
    root = write_tree({})
    (root / "a.h").write_bytes(b"int a;\r\nint b;\r\n")
    graph = build_graph(Path("a.h"), root)
    text = render(order_graph(graph), graph.external_includes)

    assert "int a;\nint b;\n" in text
    assert "\r" not in text


def test_disclaimer_copied_after_pragma(packed_tree, tmp_path):
    graph, files = packed_tree
    disclaimer = tmp_path / "LICENSE.txt"
    disclaimer.write_text("// Copyright\r\n// MIT License\r\n")

    lines = render(files, graph.external_includes, disclaimer=disclaimer).splitlines()
    assert lines[:4] == ["#pragma once", "// Copyright", "// MIT License", banner()]


def test_banner_timestamp():
    stamp = datetime(2024, 3, 1, 12, 30, 5, tzinfo=timezone.utc)
    assert banner() == f"// This file was automatically generated by headerpack v{__version__}"
    assert banner(stamp).endswith(" at 2024-03-01 12:30:05Z")


def test_render_is_byte_identical_across_runs(packed_tree):
    graph, files = packed_tree
    assert render(files, graph.external_includes) == render(files, graph.external_includes)


class TestWriteOutput:
    def test_creates_parent_directories(self, tmp_path):
        target = tmp_path / "out" / "nested" / "single.hpp"
        write_output(target, "#pragma once\n")

        assert target.read_text() == "#pragma once\n"
        assert os.listdir(target.parent) == ["single.hpp"]

    def test_replaces_existing_file(self, tmp_path):
        target = tmp_path / "single.hpp"
        target.write_text("old\n")
        write_output(target, "new\r\n")

        assert target.read_bytes() == b"new\r\n"

    def test_failure_leaves_existing_file(self, tmp_path, monkeypatch):
        target = tmp_path / "single.hpp"
        target.write_text("old\n")

        def fail(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", fail)
        with pytest.raises(OSError, match="disk full"):
            write_output(target, "new\n")

        assert target.read_text() == "old\n"
        assert os.listdir(tmp_path) == ["single.hpp"]


def test_body_control_characters_kept_verbatim(write_tree):
    root = write_tree({})
    (root / "a.h").write_bytes(b"int a;\n\x0c\nint b; /* x\x1cy */\n")
    graph = build_graph(Path("a.h"), root)
    text = render(order_graph(graph), graph.external_includes)

    assert "int a;\n\x0c\nint b; /* x\x1cy */\n" in text


def test_undecodable_bytes_round_trip(write_tree, tmp_path):
    root = write_tree({})
    (root / "a.h").write_bytes(b"// Copyright \xa9 1998 J\xfcrgen\nint a;\n")
    graph = build_graph(Path("a.h"), root)
    target = tmp_path / "out" / "single.hpp"
    write_output(target, render(order_graph(graph), graph.external_includes))

    assert b"// Copyright \xa9 1998 J\xfcrgen\nint a;\n" in target.read_bytes()


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
class TestOutputMode:
    def test_new_file_honours_umask(self, tmp_path):
        previous = os.umask(0o027)
        try:
            target = tmp_path / "single.hpp"
            write_output(target, "x\n")
        finally:
            os.umask(previous)

        assert stat.S_IMODE(target.stat().st_mode) == 0o640

    def test_existing_file_keeps_mode(self, tmp_path):
        target = tmp_path / "single.hpp"
        target.write_text("old\n")
        target.chmod(0o600)
        write_output(target, "new\n")

        assert stat.S_IMODE(target.stat().st_mode) == 0o600
        assert target.read_text() == "new\n"
