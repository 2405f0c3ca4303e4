import logging
import re
from datetime import datetime
from typing import List, Mapping, Optional, Union

from nbscript.conversion.models import ConversionOptions, NotebookDocument

logger = logging.getLogger(__name__)

HEADER_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# line start (also after a lone CR, U+2028 or U+2029), indentation, then %%, % or a shell escape
MAGIC_LINE = re.compile(r"(?:^|(?<=[\r\u2028\u2029]))([^\S\n]*)(%{1,2}|!)", re.MULTILINE)
NOTEBOOK_SUFFIX = re.compile(r"\.ipynb$", re.IGNORECASE)


def normalize_source(source) -> str:
    """
    Flatten a cell source into one LF-terminated string.
    """
    if source is None:
        return ""
    if isinstance(source, str):
        text = source
    else:
        text = "".join(source)
    return text.replace("\r\n", "\n")


def comment_magics(body: str) -> str:
    return MAGIC_LINE.sub(lambda m: f"{m.group(1)}# {m.group(2)}", body)


def build_header(filename: str, now: Optional[datetime] = None) -> List[str]:
    now = now or datetime.now()
    return [
        "#!/usr/bin/env python",
        "# coding: utf-8",
        f"# Source: {filename}",
        f"# Generated: {now.strftime(HEADER_TIMESTAMP_FORMAT)}",
    ]


def suggest_output_name(filename: str) -> str:
    if NOTEBOOK_SUFFIX.search(filename):
        return NOTEBOOK_SUFFIX.sub(".py", filename)
    return f"{filename}.py"


def notebook_to_script(
    document: Union[NotebookDocument, Mapping],
    filename: str,
    options: Optional[ConversionOptions] = None,
    *,
    now: Optional[datetime] = None,
) -> str:
    """
    Convert a notebook into a plain script.

    Markdown cells become '# '-prefixed comment lines preceded by a blank line,
    code cells are copied as single blocks and any other cell type is dropped.
    The In[n] counter only advances on code cells.
    """
    if not isinstance(document, NotebookDocument):
        document = NotebookDocument.model_validate(document)
    options = options or ConversionOptions()

    lines = []
    if options.header:
        lines.extend(build_header(filename, now))

    code_index = 1
    for cell in document.cells:
        if cell.cell_type == "markdown":
            lines.append("")
            for line in normalize_source(cell.source).split("\n"):
                lines.append(f"# {line}")
            continue

        if cell.cell_type != "code":
            logger.debug("Skipping %s cell", cell.cell_type)
            continue

        if options.in_tags:
            lines.extend(["", f"# In[{code_index}]:"])

        body = normalize_source(cell.source)
        if options.magics:
            body = comment_magics(body)

        lines.append(body)
        code_index += 1

    logger.debug("Converted %d cells (%d code) from %s",
                 len(document.cells), code_index - 1, filename)
    return "\n".join(lines)
