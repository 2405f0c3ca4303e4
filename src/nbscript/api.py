import logging
import os
from typing import Optional

from nbscript.checks import is_remote
from nbscript.configs import configs
from nbscript.delivery.sinks import ClipboardSink, FileSink, StdoutSink
from nbscript.pipeline import ConversionResult, run_conversion_pipeline

ALLOWED_MODES = {"download", "clipboard", "stdout"}

logger = logging.getLogger(__name__)


def build_sink(mode: str, input_file: str, output_directory: Optional[str] = None):
    normalized_mode = mode.strip().lower()
    if normalized_mode not in ALLOWED_MODES:
        raise ValueError("Mode must be 'download', 'clipboard', or 'stdout'.")

    if normalized_mode == "clipboard":
        return ClipboardSink()
    if normalized_mode == "stdout":
        return StdoutSink()

    if output_directory is None and not is_remote(input_file):
        output_directory = os.path.dirname(os.path.abspath(input_file))
    return FileSink(output_directory=output_directory)


def convert_notebook(
    input_file: str,
    output_directory: Optional[str] = None,
    *,
    magics: Optional[bool] = None,
    in_tags: Optional[bool] = None,
    header: Optional[bool] = None,
    mode: str = "download",
) -> ConversionResult:
    """
    Public API for converting a Jupyter notebook (path or URL) into a script.

    Flags left as None fall back to the NBSCRIPT_* defaults.
    """
    logger.info("Starting conversion for %s", input_file)
    options = configs.options(magics=magics, in_tags=in_tags, header=header)
    sink = build_sink(mode, input_file, output_directory)

    result = run_conversion_pipeline(input_file, sink, options, timeout=configs.request_timeout)
    logger.info("Conversion results delivered to %s", result.destination)
    return result
