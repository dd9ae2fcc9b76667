"""Audio file generation with an ordered chain of fallback strategies.

Every strategy writes into the public audio directory and returns the file
name it produced. The generator tries them in order and stops at the first
success, so a browser-playable file exists even when the TTS service is down.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from config.settings import Settings, get_settings
from conversation.errors import SynthesisFailedError
from speech.tts import BaseSynthesizer, build_synthesizer

LOGGER = logging.getLogger(__name__)

# One MPEG-1 Layer III frame header followed by empty frame data.
PLACEHOLDER_MP3 = bytes([0xFF, 0xFB, 0x90, 0x00]) + bytes(24)
MINIMAL_MP3 = bytes([0xFF, 0xFB, 0x90, 0x00, 0x00, 0x00, 0x00, 0x00])


def _timestamp_ms() -> int:
    return time.time_ns() // 1_000_000


def unique_name(directory: Path, prefix: str, suffix: str = ".mp3") -> tuple[str, int]:
    """Return ``(file name, stamp)`` for a file that does not exist yet."""

    stamp = _timestamp_ms()
    name = f"{prefix}{stamp}{suffix}"
    while (directory / name).exists():
        stamp += 1
        name = f"{prefix}{stamp}{suffix}"
    return name, stamp


class AudioStrategy(ABC):
    """One tier of the audio fallback chain."""

    name: str = "strategy"

    @abstractmethod
    async def produce(self, text: str, directory: Path) -> str:
        """Write an audio file for ``text`` and return its file name."""


class SpeechStrategy(AudioStrategy):
    """Real speech from a synthesizer."""

    name = "speech"

    def __init__(self, synthesizer: BaseSynthesizer) -> None:
        self._synthesizer = synthesizer

    async def produce(self, text: str, directory: Path) -> str:
        audio = await self._synthesizer.synthesize(text)
        file_name, _ = unique_name(directory, "response_")
        (directory / file_name).write_bytes(audio)
        return file_name


class PlaceholderAudioStrategy(AudioStrategy):
    """Silent MP3 frame plus a companion text file with the spoken content."""

    name = "placeholder"

    async def produce(self, text: str, directory: Path) -> str:
        file_name, stamp = unique_name(directory, "response_")
        (directory / file_name).write_bytes(PLACEHOLDER_MP3)

        note = (
            f'Spoken Text: "{text}"\n\n'
            f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n"
            "Note: This is a demo audio file. In production, this would contain "
            "the actual speech audio."
        )
        (directory / f"response_text_{stamp}.txt").write_text(note, encoding="utf-8")
        return file_name


class MinimalAudioStrategy(AudioStrategy):
    name = "minimal"

    async def produce(self, text: str, directory: Path) -> str:
        file_name, _ = unique_name(directory, "fallback_")
        (directory / file_name).write_bytes(MINIMAL_MP3)
        return file_name


class AudioGenerator:
    """Runs the strategy chain for a piece of response text."""

    def __init__(self, strategies: Sequence[AudioStrategy], directory: Path) -> None:
        if not strategies:
            raise ValueError("At least one audio strategy is required.")
        self._strategies = list(strategies)
        self._directory = directory

    async def synthesize(self, text: str) -> str:
        for strategy in self._strategies:
            try:
                self._directory.mkdir(parents=True, exist_ok=True)
                file_name = await strategy.produce(text, self._directory)
            except Exception as exc:
                LOGGER.warning("Audio strategy %r failed: %s", strategy.name, exc)
                continue
            LOGGER.info("Audio generated with %r strategy: %s", strategy.name, file_name)
            return file_name

        raise SynthesisFailedError()


def build_audio_generator(
    settings: Settings | None = None,
    synthesizer: BaseSynthesizer | None = None,
) -> AudioGenerator:
    """Factory returning the default three-tier chain."""

    settings = settings or get_settings()
    return AudioGenerator(
        [
            SpeechStrategy(synthesizer or build_synthesizer(settings)),
            PlaceholderAudioStrategy(),
            MinimalAudioStrategy(),
        ],
        settings.audio_dir,
    )


class PlaceholderAudioMap:
    """In-memory text keyed by generated file name; no audio is produced."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def register(self, text: str) -> str:
        stamp = _timestamp_ms()
        file_name = f"audio_{stamp}.mp3"
        while file_name in self._entries:
            stamp += 1
            file_name = f"audio_{stamp}.mp3"
        self._entries[file_name] = text
        return file_name

    def get(self, file_name: str) -> str | None:
        return self._entries.get(file_name)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def __contains__(self, file_name: object) -> bool:
        return file_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
