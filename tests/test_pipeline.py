"""Tests for the load -> convert -> deliver pipeline and the public API."""

from unittest.mock import MagicMock

import pytest

from nbscript import api
from nbscript.checks import CorruptedNotebookError, load_notebook
from nbscript.conversion.models import ConversionOptions
from nbscript.delivery.sinks import ClipboardSink, DeliveryError, FileSink, StdoutSink
from nbscript.pipeline import (
    ConversionResult,
    NotReadyError,
    convert_loaded,
    deliver,
    run_conversion_pipeline,
)

from conftest import code, markdown

TITLE_DOC = {"cells": [markdown("Title"), code("x=1\n%time y=2")]}


class TestConvertLoaded:
    def test_result(self, write_notebook):
        loaded = load_notebook(str(write_notebook(TITLE_DOC, name="Demo.IPYNB")))
        result = convert_loaded(loaded, ConversionOptions(magics=True))

        assert result.text == "\n# Title\nx=1\n# %time y=2"
        assert result.output_filename == "Demo.py"
        assert result.line_count == 4
        assert result.destination is None

    def test_no_code_cells(self, write_notebook):
        loaded = load_notebook(str(write_notebook({"cells": [markdown("prose")]})))
        with pytest.raises(NotReadyError, match="No code cells found."):
            convert_loaded(loaded)


class TestRunPipeline:
    def test_writes_script(self, write_notebook, tmp_path):
        path = write_notebook(TITLE_DOC)
        sink = FileSink(output_directory=str(tmp_path / "out"))
        result = run_conversion_pipeline(str(path), sink, ConversionOptions(in_tags=True))

        written = (tmp_path / "out" / "analysis.py").read_text(encoding="utf-8")
        assert written == result.text == "\n# Title\n\n# In[1]:\nx=1\n%time y=2"
        assert result.destination == str(tmp_path / "out" / "analysis.py")

    def test_load_failure_never_reaches_sink(self, write_notebook):
        sink = MagicMock()
        sink.name = "mock"
        with pytest.raises(CorruptedNotebookError):
            run_conversion_pipeline(str(write_notebook("{oops")), sink)
        sink.deliver.assert_not_called()

    def test_delivery_failure_keeps_result_reusable(self):
        result = ConversionResult(text="x = 1", output_filename="nb.py")
        failing = MagicMock()
        failing.deliver.side_effect = DeliveryError("clipboard denied")
        with pytest.raises(DeliveryError):
            deliver(result, failing)

        working = MagicMock()
        working.deliver.return_value = "somewhere"
        delivered = deliver(result, working)
        working.deliver.assert_called_once_with("x = 1", "nb.py")
        assert delivered.destination == "somewhere"
        assert result.destination is None


class TestApi:
    def test_defaults_to_notebook_directory(self, write_notebook, tmp_path):
        path = write_notebook(TITLE_DOC)
        result = api.convert_notebook(str(path), magics=False, in_tags=False, header=False)
        assert (tmp_path / "analysis.py").read_text(encoding="utf-8") == result.text

    def test_unset_flags_use_configured_defaults(self, write_notebook, tmp_path, monkeypatch):
        monkeypatch.setattr(api.configs, "magics", True)
        monkeypatch.setattr(api.configs, "in_tags", True)
        monkeypatch.setattr(api.configs, "header", False)
        path = write_notebook(TITLE_DOC)

        result = api.convert_notebook(str(path), str(tmp_path / "out"))
        assert result.text == "\n# Title\n\n# In[1]:\nx=1\n# %time y=2"

        result = api.convert_notebook(str(path), str(tmp_path / "out"), magics=False)
        assert result.text.endswith("\n%time y=2")

    def test_unknown_mode(self, write_notebook):
        with pytest.raises(ValueError, match="Mode must be"):
            api.convert_notebook(str(write_notebook(TITLE_DOC)), mode="fax")

    @pytest.mark.parametrize("mode,sink_type", [
        ("download", FileSink),
        ("clipboard", ClipboardSink),
        ("STDOUT", StdoutSink),
    ])
    def test_build_sink(self, mode, sink_type, tmp_path):
        assert isinstance(api.build_sink(mode, str(tmp_path / "a.ipynb")), sink_type)

    def test_stdout_mode(self, write_notebook, capsys):
        api.convert_notebook(str(write_notebook(TITLE_DOC)), mode="stdout",
                             magics=False, in_tags=False, header=False)
        assert capsys.readouterr().out == "\n# Title\nx=1\n%time y=2"
