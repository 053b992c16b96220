"""Optional speech capture and playback.

Both capabilities may be missing at runtime. Absence is a normal state:
the controller falls back to a simulated transcript or reports that
read-aloud is unsupported.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class SpeechRecognizer(Protocol):
    async def transcribe(self) -> str: ...


@runtime_checkable
class SpeechSynthesizer(Protocol):
    def speak(self, text: str) -> bool: ...


SPEECH_COMMANDS = ("say", "espeak-ng", "espeak", "spd-say")


class CommandSynthesizer:
    def __init__(self, command: str, timeout_s: float = 120.0):
        self.command = command
        self.timeout_s = timeout_s

    @classmethod
    def detect(cls) -> CommandSynthesizer | None:
        for name in SPEECH_COMMANDS:
            path = shutil.which(name)
            if path:
                return cls(path)
        return None

    def speak(self, text: str) -> bool:
        try:
            result = subprocess.run(
                [self.command, text],
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"{self.command} timed out")
            return False
        except OSError as e:
            logger.warning(f"Cannot run {self.command}: {e}")
            return False
        if result.returncode != 0:
            logger.warning(f"{self.command} exited with {result.returncode}: {result.stderr.strip()}")
            return False
        return True
