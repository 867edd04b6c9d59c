import hashlib
import os
import shutil
import subprocess
from typing import List, Optional

from clipkeep.clipboard.base import ClipboardBackend


class LinuxClipboard(ClipboardBackend):
    """Clipboard access through wl-clipboard (Wayland) or xclip (X11).

    Neither tool exposes a change counter, so one is derived locally: every
    call digests the advertised targets and the current content and bumps an
    integer whenever the digest differs from the previous call.
    """

    _IMAGE_TARGET = "image/png"
    _TEXT_TARGETS = {
        "text/plain",
        "text/plain;charset=utf-8",
        "text/plain;charset=utf8",
        "utf8_string",
        "string",
    }

    def __init__(self):
        self._counter = 0
        self._last_signature: Optional[str] = None

    def change_count(self) -> int:
        signature = self._signature()
        if signature is not None and signature != self._last_signature:
            self._last_signature = signature
            self._counter += 1
        return self._counter

    def _signature(self) -> Optional[str]:
        tool = self._tool()
        if tool is None:
            return None

        types = self._list_types()
        digest = hashlib.sha1(tool.encode("utf-8"))
        digest.update("\n".join(types).encode("utf-8"))

        text_target = self._text_target(types)
        if text_target is not None:
            data = self._read_target(text_target)
        elif self._IMAGE_TARGET in {target.lower() for target in types}:
            data = self._read_target(self._IMAGE_TARGET)
        else:
            data = None
        digest.update(data or b"")
        return digest.hexdigest()

    def _tool(self) -> Optional[str]:
        if os.environ.get("WAYLAND_DISPLAY") and shutil.which("wl-paste"):
            return "wayland"
        if shutil.which("xclip"):
            return "x11"
        return None

    def _list_types(self) -> List[str]:
        tool = self._tool()
        if tool == "wayland":
            data = self._run_command(["wl-paste", "--list-types"], timeout=1.5)
        elif tool == "x11":
            data = self._run_command(
                ["xclip", "-selection", "clipboard", "-t", "TARGETS", "-o"],
                timeout=1.5,
            )
        else:
            data = None
        return self._parse_type_list(data)

    def _read_target(self, target: str) -> Optional[bytes]:
        tool = self._tool()
        if tool == "wayland":
            command = ["wl-paste", "--type", target]
            if target.startswith("text/") or target.lower() in self._TEXT_TARGETS:
                command.append("--no-newline")
        elif tool == "x11":
            command = ["xclip", "-selection", "clipboard", "-t", target, "-o"]
        else:
            return None
        return self._run_command(command, timeout=1.5)

    def _read_text(self) -> Optional[str]:
        text_target = self._text_target(self._list_types())
        if text_target is None:
            return None
        data = self._read_target(text_target)
        if not data:
            return None
        return data.decode("utf-8", errors="ignore")

    def _read_image(self) -> Optional[bytes]:
        types = {target.lower() for target in self._list_types()}
        if self._IMAGE_TARGET not in types:
            return None
        return self._read_target(self._IMAGE_TARGET)

    def _clear(self) -> None:
        # xclip has no clear; the following write replaces the selection
        if self._tool() == "wayland":
            subprocess.run(["wl-copy", "--clear"], check=True, timeout=2.0)

    def _write_text(self, text: str) -> None:
        self._write(text.encode("utf-8"), None)

    def _write_image(self, data: bytes) -> None:
        self._write(data, self._IMAGE_TARGET)

    def _write(self, payload: bytes, mime: Optional[str]) -> None:
        tool = self._tool()
        if tool == "wayland":
            command = ["wl-copy"]
            if mime:
                command += ["--type", mime]
        elif tool == "x11":
            command = ["xclip", "-selection", "clipboard"]
            if mime:
                command += ["-t", mime]
        else:
            raise RuntimeError("Neither wl-copy nor xclip is available")

        subprocess.run(command, input=payload, check=True, timeout=2.0)

    def _text_target(self, types: List[str]) -> Optional[str]:
        # owners such as xterm advertise only UTF8_STRING/STRING
        for target in types:
            if target.lower() in self._TEXT_TARGETS:
                return target
        return None

    def _parse_type_list(self, data: Optional[bytes]) -> List[str]:
        if not data:
            return []
        text = data.decode("utf-8", errors="ignore")
        return [line.strip() for line in text.splitlines() if line.strip()]

    def _run_command(self, command: List[str], timeout: float) -> Optional[bytes]:
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                timeout=timeout,
            )
            return result.stdout
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError):
            return None
