"""
nbscript CLI: convert a Jupyter notebook into a plain Python script.
"""

import logging
import sys

import click

from nbscript.api import build_sink
from nbscript.checks import NotebookLoadError
from nbscript.configs import configs
from nbscript.delivery.sinks import DeliveryError, FileSink
from nbscript.logging_config import configure_logging
from nbscript.pipeline import NotReadyError, run_conversion_pipeline


@click.command()
@click.argument("source")
@click.option("-o", "--output-dir", "output_dir", type=click.Path(file_okay=False),
              help="Directory for the .py file (defaults to the notebook's directory).")
@click.option("--output", "output_file", type=click.Path(dir_okay=False),
              help="Exact path of the .py file.")
@click.option("--magics/--no-magics", default=None,
              help="Comment out %, %% and ! lines.")
@click.option("--in-tags/--no-in-tags", default=None,
              help="Insert '# In[n]:' before every code cell.")
@click.option("--header/--no-header", default=None,
              help="Prepend shebang, coding, source and timestamp lines.")
@click.option("--clipboard", "to_clipboard", is_flag=True,
              help="Copy the script to the clipboard instead of writing a file.")
@click.option("--stdout", "to_stdout", is_flag=True,
              help="Print the script instead of writing a file.")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
@click.version_option(package_name="nbscript", prog_name="nbscript")
def main(source, output_dir, output_file, magics, in_tags, header, to_clipboard, to_stdout, verbose) -> None:
    """Convert SOURCE (a .ipynb path or http(s) URL) into a Python script."""
    configure_logging(level=logging.DEBUG if verbose else configs.logging_level)

    options = configs.options(magics=magics, in_tags=in_tags, header=header)

    if to_clipboard and to_stdout:
        raise click.UsageError("--clipboard and --stdout are mutually exclusive.")
    mode = "clipboard" if to_clipboard else "stdout" if to_stdout else "download"
    if mode != "download" and (output_dir or output_file):
        raise click.UsageError("-o/--output-dir and --output only apply when writing a file.")
    if output_dir and output_file:
        raise click.UsageError("-o/--output-dir and --output are mutually exclusive.")
    if mode == "download" and output_file:
        sink = FileSink(output_path=output_file)
    else:
        sink = build_sink(mode, source, output_dir)

    try:
        result = run_conversion_pipeline(source, sink, options, timeout=configs.request_timeout)
    except (NotebookLoadError, FileNotFoundError, ConnectionError) as e:
        click.secho(f"✗ {e}", fg="red", err=True)
        sys.exit(1)
    except NotReadyError as e:
        click.secho(str(e), fg="yellow", err=True)
        sys.exit(1)
    except (DeliveryError, NotADirectoryError) as e:
        click.secho(f"✗ {e}", fg="red", err=True)
        sys.exit(2)

    if mode == "clipboard":
        click.secho(f"Complete. Copied {result.line_count:,} lines to clipboard.", fg="green", err=True)
    elif mode == "download":
        click.secho(f"Complete. Wrote {result.line_count:,} lines to {result.destination}",
                    fg="green", err=True)


if __name__ == "__main__":
    main()
