import os
import shutil
import subprocess
from typing import List, Optional

from cliphistory.clipboard.base import ClipboardPort


class LinuxClipboard(ClipboardPort):
    _TEXT_TARGETS = (
        "text/plain;charset=utf-8",
        "text/plain;charset=utf8",
        "utf8_string",
        "text/plain",
        "string",
    )

    def _read_text(self) -> Optional[str]:
        strategies = (
            self._from_wayland,
            self._from_xclip,
        )

        for strategy in strategies:
            try:
                result = strategy()
            except Exception:
                result = None
            if result:
                return result

        return None

    def _from_wayland(self) -> Optional[str]:
        if not os.environ.get("WAYLAND_DISPLAY") or not shutil.which("wl-paste"):
            return None

        types = self._parse_type_list(
            self._run_command(["wl-paste", "--list-types"], timeout=1.5)
        )
        target = self._pick_text_target(types)
        if types and target is None:
            # clipboard holds something other than text
            return None

        command = ["wl-paste", "--no-newline"]
        if target:
            command[1:1] = ["--type", target]
        return self._decode(self._run_command(command, timeout=1.5))

    def _from_xclip(self) -> Optional[str]:
        if not shutil.which("xclip"):
            return None

        types = self._parse_type_list(
            self._run_command(
                ["xclip", "-selection", "clipboard", "-t", "TARGETS", "-o"],
                timeout=1.5,
            )
        )
        target = self._pick_text_target(types)
        if types and target is None:
            return None

        command = ["xclip", "-selection", "clipboard", "-o"]
        if target:
            command[3:3] = ["-t", target]
        return self._decode(self._run_command(command, timeout=1.5))

    def _pick_text_target(self, types: List[str]) -> Optional[str]:
        lowered = {t.lower(): t for t in types}
        for candidate in self._TEXT_TARGETS:
            if candidate in lowered:
                return lowered[candidate]
        return None

    def _parse_type_list(self, data: Optional[bytes]) -> List[str]:
        if not data:
            return []
        text = data.decode("utf-8", errors="ignore")
        return [line.strip() for line in text.splitlines() if line.strip()]

    @staticmethod
    def _decode(payload: Optional[bytes]) -> Optional[str]:
        if not payload:
            return None
        return payload.decode("utf-8", errors="ignore")

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

    def _write_text(self, text: str) -> bool:
        data = text.encode("utf-8")

        if os.environ.get("WAYLAND_DISPLAY") and shutil.which("wl-copy"):
            subprocess.run(
                ["wl-copy"],
                input=data,
                check=True,
                timeout=2.0
            )
            return True

        if shutil.which("xclip"):
            subprocess.run(
                ["xclip", "-selection", "clipboard"],
                input=data,
                check=True,
                timeout=2.0
            )
            return True

        return False
