import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict

from nbscript.checks import LoadedNotebook, load_notebook
from nbscript.conversion.convert_to_script import notebook_to_script, suggest_output_name
from nbscript.conversion.models import ConversionOptions

logger = logging.getLogger(__name__)


class NotReadyError(ValueError):
    def __init__(self, filename: str):
        super().__init__("No code cells found.")
        self.filename = filename


class ConversionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    output_filename: str
    destination: Optional[str] = None

    @property
    def line_count(self) -> int:
        return len(self.text.split("\n"))


def convert_loaded(
    loaded: LoadedNotebook,
    options: Optional[ConversionOptions] = None,
) -> ConversionResult:
    if not loaded.ready:
        logger.warning("%s has no code cells; nothing to convert", loaded.filename)
        raise NotReadyError(loaded.filename)

    logger.info("Converting %s", loaded.filename)
    text = notebook_to_script(loaded.document, loaded.filename, options)
    return ConversionResult(text=text, output_filename=suggest_output_name(loaded.filename))


def deliver(result: ConversionResult, sink) -> ConversionResult:
    """
    Hand the text to a sink. On failure the sink's error propagates and
    `result` is still valid for another attempt.
    """
    destination = sink.deliver(result.text, result.output_filename)
    return result.model_copy(update={"destination": destination})


def run_conversion_pipeline(
    source: str,
    sink,
    options: Optional[ConversionOptions] = None,
    timeout: Optional[float] = None,
) -> ConversionResult:
    logger.info("Starting conversion pipeline for %s (sink=%s)", source, sink.name)

    # 1. Load and validate
    loaded = load_notebook(source, timeout=timeout)

    # 2. Convert
    result = convert_loaded(loaded, options)

    # 3. Deliver
    result = deliver(result, sink)

    logger.info("Conversion finished: %d lines to %s", result.line_count, result.destination)
    return result
