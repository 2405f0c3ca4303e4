import base64
import logging
import os
import shutil
import subprocess
import sys
from typing import Optional, TextIO

logger = logging.getLogger(__name__)

# some terminals cap OSC 52 payloads (base64 encoded) at ~74KB
OSC52_MAX_BYTES = 74994


class DeliveryError(RuntimeError):
    """The converted text could not be handed to its destination."""


class FileSink(object):
    name = "download"

    def __init__(self, output_directory: Optional[str] = None, output_path: Optional[str] = None):
        self.output_directory = output_directory
        self.output_path = output_path

    def _target(self, filename: str) -> str:
        if self.output_path:
            return self.output_path
        return os.path.join(self.output_directory or os.getcwd(), filename)

    def deliver(self, text: str, filename: str) -> str:
        target = self._target(filename)
        directory = os.path.dirname(target) or "."

        if os.path.exists(directory) and not os.path.isdir(directory):
            raise NotADirectoryError(f"Output path exists but is not a directory: {directory}")

        try:
            os.makedirs(directory, exist_ok=True)
            with open(target, "w", encoding="utf-8", newline="\n") as outfile:
                outfile.write(text)
        except OSError as exc:
            raise DeliveryError(f"Could not write {target}: {exc}") from exc

        logger.info("Wrote script to %s", target)
        return target


class NativeClipboard(object):
    """
    System clipboard through the platform tool:
    pbcopy on macOS, clip on Windows, wl-copy / xclip / xsel elsewhere.
    """

    def __init__(self):
        self.command = self._detect_tool()

    @property
    def available(self) -> bool:
        return self.command is not None

    def _detect_tool(self):
        if sys.platform == "darwin":
            return ["pbcopy"] if shutil.which("pbcopy") else None
        if sys.platform == "win32":
            return ["clip"] if shutil.which("clip") else None

        session_type = os.environ.get("XDG_SESSION_TYPE", "").lower()
        if session_type == "wayland" and shutil.which("wl-copy"):
            return ["wl-copy"]
        if shutil.which("xclip"):
            return ["xclip", "-selection", "clipboard"]
        if shutil.which("xsel"):
            return ["xsel", "--clipboard", "--input"]
        if shutil.which("wl-copy"):
            return ["wl-copy"]
        return None

    def copy(self, text: str) -> None:
        try:
            proc = subprocess.run(self.command,
                                  input=text.encode("utf-8"),
                                  capture_output=True,
                                  timeout=5)
        except (subprocess.TimeoutExpired, OSError) as exc:
            raise DeliveryError(f"Clipboard access failed: {exc}") from exc

        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            raise DeliveryError(f"Clipboard access failed: {stderr or proc.returncode}")


class OSC52Clipboard(object):
    """Terminal clipboard through the OSC 52 escape sequence. Cannot detect failure."""

    available = True

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def copy(self, text: str) -> None:
        encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
        if len(encoded) > OSC52_MAX_BYTES:
            raise DeliveryError(
                f"Script is too large for the terminal clipboard ({len(encoded)} encoded bytes)")

        stream = self.stream or sys.stdout
        stream.write(f"\x1b]52;c;{encoded}\x07")
        stream.flush()


class ClipboardSink(object):
    name = "clipboard"

    def __init__(self, provider=None):
        if provider is None:
            native = NativeClipboard()
            provider = native if native.available else OSC52Clipboard()
        self.provider = provider

    def deliver(self, text: str, filename: str) -> str:
        logger.debug("Copying %s with %s", filename, type(self.provider).__name__)
        self.provider.copy(text)
        logger.info("Copied %s to clipboard", filename)
        return "clipboard"


class StdoutSink(object):
    name = "stdout"

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def deliver(self, text: str, filename: str) -> str:
        stream = self.stream or sys.stdout
        stream.write(text)
        stream.flush()
        return "stdout"
