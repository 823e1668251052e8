#!/usr/bin/env python3
"""Tests for IVR script batch conversion."""

import asyncio
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from ivrflow.clients.graphviz_client import GraphvizRenderer, RenderError
from ivrflow.handlers.convert import (
    _create_error_result,
    _create_success_result,
    handle_ivr_batch,
    resolve_formats,
)
from ivrflow.services.compiler import OutputFormat
from ivrflow.services.domain.graph import GraphModel
from ivrflow.services.domain.ivr_script.errors import UnsupportedFormatError
from utils.converter_helpers import load_fixture, module_xml, script_xml

TIMESTAMP = 1700000000000


class TestConversionBatchProcessing:
    """Test suite for IVR batch processing."""

    @pytest.fixture
    def mock_renderer(self):
        """Render delegate returning a fixed SVG."""
        renderer = Mock(spec=GraphvizRenderer)
        renderer.render.return_value = "<svg>graph</svg>"
        return renderer

    @pytest.fixture
    def create_ivr_files(self, tmp_path):
        """Factory to write IVR script files into a temp input directory."""
        def _create_files(contents: dict[str, str]) -> list[Path]:
            input_dir = tmp_path / "in"
            input_dir.mkdir(exist_ok=True)
            paths = []
            for name, text in contents.items():
                path = input_dir / name
                path.write_text(text, encoding="utf-8")
                paths.append(path)
            return paths
        return _create_files

    @pytest.mark.asyncio
    async def test_all_formats_written(self, tmp_path, create_ivr_files, mock_renderer):
        files = create_ivr_files({"main_menu.xml": load_fixture("main_menu.xml")})
        out_dir = tmp_path / "out"

        report = await handle_ivr_batch(
            files, formats=["dot", "svg", "mermaid", "plantuml"],
            output_dir=out_dir, renderer=mock_renderer, timestamp_ms=TIMESTAMP,
        )

        assert report.total == 1
        assert report.succeeded == 1
        result = report.results[0]
        assert result.status == "success"
        assert result.node_count == 6
        assert result.edge_count == 8
        base = out_dir / f"main_menu.xml_{TIMESTAMP}"
        assert result.outputs == {
            "dot": str(base) + ".dot",
            "mermaid": str(base) + ".mmd",
            "plantuml": str(base) + ".puml",
            "svg": str(base) + ".svg",
        }
        assert Path(result.outputs["svg"]).read_text(encoding="utf-8") == "<svg>graph</svg>"
        assert Path(result.outputs["dot"]).read_text(encoding="utf-8").startswith("digraph")
        assert Path(result.outputs["plantuml"]).read_text(encoding="utf-8").startswith("@startuml")

    @pytest.mark.asyncio
    async def test_renderer_receives_dot_text(self, tmp_path, create_ivr_files, mock_renderer):
        files = create_ivr_files({"a.xml": script_xml(module_xml("play", "A"))})

        await handle_ivr_batch(
            files, formats=["svg"], output_dir=tmp_path, renderer=mock_renderer, annotate_source=True,
        )

        dot_text = mock_renderer.render.call_args.args[0]
        assert dot_text.startswith('digraph "IVR"')
        assert '"__source__" [label="a.xml", shape="note"];' in dot_text

    @pytest.mark.asyncio
    async def test_partial_failure_does_not_abort_batch(self, tmp_path, create_ivr_files, mock_renderer):
        files = create_ivr_files({
            "good.xml": script_xml(module_xml("play", "A")),
            "broken.xml": "<ivrScript><modules>",
            "noschema.xml": "<ivrScript/>",
            "also_good.xml": script_xml(module_xml("hangup", "H")),
        })

        report = await handle_ivr_batch(files, formats=["dot"], output_dir=tmp_path / "out", renderer=mock_renderer)

        assert [r.filename for r in report.results] == ["good.xml", "broken.xml", "noschema.xml", "also_good.xml"]
        assert [r.status for r in report.results] == ["success", "failed", "failed", "success"]
        assert report.results[1].error_stage == "compile"
        assert "Malformed" in report.results[1].error
        assert report.results[2].error_stage == "compile"
        assert "module collection missing" in report.results[2].error
        assert report.succeeded == 2
        assert report.failed == 2
        assert report.ok is False

    @pytest.mark.asyncio
    async def test_render_failure_is_distinguished(self, tmp_path, create_ivr_files, mock_renderer):
        files = create_ivr_files({"a.xml": script_xml(module_xml("play", "A"))})
        mock_renderer.render.side_effect = RenderError("Graphviz executables not found on PATH")

        report = await handle_ivr_batch(
            files, formats=["dot", "svg"], output_dir=tmp_path / "out", renderer=mock_renderer,
        )

        result = report.results[0]
        assert result.status == "failed"
        assert result.error_stage == "render"
        assert "dot" in result.outputs
        assert "svg" not in result.outputs

    @pytest.mark.asyncio
    async def test_unreadable_file(self, tmp_path, mock_renderer):
        report = await handle_ivr_batch(
            [tmp_path / "missing.xml"], formats=["dot"], output_dir=tmp_path, renderer=mock_renderer,
        )

        assert report.results[0].error_stage == "read"
        assert report.results[0].error.startswith("Failed to read file")

    @pytest.mark.asyncio
    async def test_timeout_is_reported(self, tmp_path, create_ivr_files, mock_renderer):
        files = create_ivr_files({"slow.xml": script_xml(module_xml("play", "A"))})

        async def _slow(*args, **kwargs):
            await asyncio.sleep(5)

        with patch.dict("os.environ", {"BATCH_OPERATION_TIMEOUT": "1"}):
            with patch("ivrflow.handlers.convert._convert_single_file", side_effect=_slow):
                report = await handle_ivr_batch(files, formats=["dot"], output_dir=tmp_path, renderer=mock_renderer)

        assert report.results[0].error_stage == "timeout"

    @pytest.mark.asyncio
    async def test_batch_size_limit_exceeded(self, tmp_path):
        files = [tmp_path / f"f{i}.xml" for i in range(6)]

        with patch.dict("os.environ", {"BATCH_MAX_DOCUMENT_FILES": "5"}):
            with pytest.raises(ValueError) as exc_info:
                await handle_ivr_batch(files, formats=["dot"], output_dir=tmp_path)

        assert "exceeds maximum of 5 files" in str(exc_info.value)
        assert "BATCH_MAX_DOCUMENT_FILES" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self):
        with pytest.raises(ValueError, match="No files"):
            await handle_ivr_batch([])

    @pytest.mark.asyncio
    async def test_unsupported_format_rejected_before_processing(self, tmp_path, mock_renderer):
        with pytest.raises(UnsupportedFormatError):
            await handle_ivr_batch([tmp_path / "a.xml"], formats=["png"], renderer=mock_renderer)

        mock_renderer.render.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_renderer_needed_without_svg(self, tmp_path, create_ivr_files):
        files = create_ivr_files({"a.xml": script_xml(module_xml("play", "A"))})

        with patch("ivrflow.handlers.convert.GraphvizRenderer") as renderer_cls:
            report = await handle_ivr_batch(files, formats=["mermaid", "uml"], output_dir=tmp_path / "out")

        renderer_cls.assert_not_called()
        assert set(report.results[0].outputs) == {"mermaid", "plantuml"}

    @pytest.mark.asyncio
    async def test_deeply_nested_document_fails_alone(self, tmp_path, create_ivr_files, mock_renderer):
        depth = 5000
        deep_xml = "<ivrScript>" + "<x>" * depth + "</x>" * depth + "</ivrScript>"
        files = create_ivr_files({
            "good.xml": script_xml(module_xml("play", "A")),
            "deep.xml": deep_xml,
        })

        report = await handle_ivr_batch(files, formats=["dot"], output_dir=tmp_path / "out", renderer=mock_renderer)

        assert [r.status for r in report.results] == ["success", "failed"]
        assert report.results[1].error_stage == "compile"
        assert "nesting too deep" in report.results[1].error

    @pytest.mark.asyncio
    async def test_unexpected_renderer_error_fails_only_its_document(
        self, tmp_path, create_ivr_files, mock_renderer
    ):
        files = create_ivr_files({
            "a.xml": script_xml(module_xml("play", "A")),
            "b.xml": script_xml(module_xml("play", "B")),
        })
        mock_renderer.render.side_effect = RuntimeError("backend crashed")

        report = await handle_ivr_batch(
            files, formats=["dot", "svg"], output_dir=tmp_path / "out", renderer=mock_renderer,
        )

        assert report.total == 2
        assert [r.status for r in report.results] == ["failed", "failed"]
        for result in report.results:
            assert result.error_stage == "render"
            assert result.error == "Unexpected error: backend crashed"
            assert "dot" in result.outputs

    @pytest.mark.asyncio
    async def test_unexpected_compile_error_is_reported(self, tmp_path, create_ivr_files, mock_renderer):
        files = create_ivr_files({"a.xml": script_xml(module_xml("play", "A"))})

        with patch("ivrflow.handlers.convert.compiler.compile", side_effect=KeyError("modules")):
            report = await handle_ivr_batch(files, formats=["dot"], output_dir=tmp_path, renderer=mock_renderer)

        assert report.results[0].error_stage == "compile"
        assert report.results[0].error.startswith("Unexpected error")

    @pytest.mark.asyncio
    async def test_same_filename_from_different_directories(self, tmp_path, mock_renderer):
        paths = []
        for folder, module_id in (("a", "A"), ("b", "B")):
            (tmp_path / folder).mkdir()
            path = tmp_path / folder / "x.xml"
            path.write_text(script_xml(module_xml("play", module_id)), encoding="utf-8")
            paths.append(path)
        out_dir = tmp_path / "out"

        report = await handle_ivr_batch(
            paths, formats=["dot"], output_dir=out_dir, renderer=mock_renderer, timestamp_ms=1,
        )

        dot_paths = [r.outputs["dot"] for r in report.results]
        assert dot_paths == [str(out_dir / "x.xml_1.dot"), str(out_dir / "x.xml_1_2.dot")]
        assert '"A"' in Path(dot_paths[0]).read_text(encoding="utf-8")
        assert '"B"' in Path(dot_paths[1]).read_text(encoding="utf-8")


class TestResultHelpers:
    """Test result construction helpers."""

    def test_create_error_result(self):
        result = _create_error_result("test.xml", "Malformed XML", "compile")

        assert result.filename == "test.xml"
        assert result.status == "failed"
        assert result.error == "Malformed XML"
        assert result.error_stage == "compile"
        assert result.outputs == {}

    def test_create_success_result(self):
        result = _create_success_result("test.xml", {"dot": "out/test.dot"}, GraphModel())

        assert result.status == "success"
        assert result.error is None
        assert result.node_count == 0

    def test_resolve_formats_dedupes_aliases(self):
        assert resolve_formats(["dot", "gv", "uml", "plantuml"]) == [OutputFormat.DOT, OutputFormat.PLANTUML]

    def test_resolve_formats_defaults(self):
        assert resolve_formats(None) == [
            OutputFormat.DOT, OutputFormat.SVG, OutputFormat.MERMAID, OutputFormat.PLANTUML,
        ]
