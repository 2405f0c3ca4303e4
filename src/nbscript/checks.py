import json
import logging
import os
from typing import Optional
from urllib.parse import unquote, urlparse

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

from nbscript.conversion.models import NotebookDocument


ALLOWED_INPUT_EXTENSIONS = {".ipynb"}
REMOTE_SCHEMES = {"http", "https"}

logger = logging.getLogger(__name__)


class NotebookLoadError(ValueError):
    """Base class for notebooks that cannot be handed to the converter."""


class InvalidExtensionError(NotebookLoadError):
    def __init__(self, source: str):
        super().__init__("Please select a file with .ipynb extension")
        self.source = source


class CorruptedNotebookError(NotebookLoadError):
    def __init__(self, source: str):
        super().__init__("File may be corrupted")
        self.source = source


class NotANotebookError(NotebookLoadError):
    def __init__(self, source: str):
        super().__init__("Not a valid Notebook format (cells array not found)")
        self.source = source


class LoadedNotebook(BaseModel):
    model_config = ConfigDict(frozen=True)

    document: NotebookDocument
    filename: str
    size: int

    @property
    def cell_count(self) -> int:
        return len(self.document.cells)

    @property
    def code_cell_count(self) -> int:
        return self.document.code_cell_count

    @property
    def ready(self) -> bool:
        return self.code_cell_count > 0


def is_remote(source: str) -> bool:
    return urlparse(source).scheme.lower() in REMOTE_SCHEMES


def source_filename(source: str) -> str:
    if is_remote(source):
        return os.path.basename(unquote(urlparse(source).path))
    return os.path.basename(source)


def check_extension(source: str) -> None:
    extension = os.path.splitext(source_filename(source))[1].lower()
    if extension not in ALLOWED_INPUT_EXTENSIONS:
        logger.error("Rejected %s: extension %r is not allowed", source, extension)
        raise InvalidExtensionError(source)


def _fetch_text(url: str, timeout: Optional[float]) -> str:
    logger.debug("Fetching notebook from %s", url)
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise ConnectionError(f"Could not fetch notebook: {url} -> {exc}") from exc

    if not response.ok:
        raise ConnectionError(f"Could not fetch notebook: {url} -> {response.status_code}")
    response.encoding = response.encoding or "utf-8"
    return response.text.removeprefix("\ufeff")


def _read_text(path: str) -> str:
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Input file not found: {path}")
    with open(path, "r", encoding="utf-8-sig", errors="replace") as infile:
        return infile.read()


def parse_notebook(text: str, source: str = "<string>") -> NotebookDocument:
    """
    Decode a notebook payload.

    Raises CorruptedNotebookError when the text is not JSON and
    NotANotebookError when it has no usable cells array.
    """
    try:
        content = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.error("Could not parse %s as JSON: %s", source, exc)
        raise CorruptedNotebookError(source) from exc

    if not isinstance(content, dict) or not isinstance(content.get("cells"), list):
        logger.error("%s has no cells array", source)
        raise NotANotebookError(source)

    try:
        return NotebookDocument.model_validate(content)
    except ValidationError as exc:
        logger.error("%s has malformed cells: %s", source, exc)
        raise NotANotebookError(source) from exc


def load_notebook(source: str, *, timeout: Optional[float] = None) -> LoadedNotebook:
    logger.debug("Loading notebook from %s", source)
    check_extension(source)

    if is_remote(source):
        text = _fetch_text(source, timeout)
    else:
        text = _read_text(source)

    document = parse_notebook(text, source)
    loaded = LoadedNotebook(document=document,
                            filename=source_filename(source),
                            size=len(text.encode("utf-8")))

    logger.info("Loaded %s (%d bytes): %d cells, %d code cells",
                loaded.filename, loaded.size, loaded.cell_count, loaded.code_cell_count)
    return loaded
