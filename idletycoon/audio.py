"""Music selection and playback reconciliation.

Which track should play is decided by :func:`resolve_track` and
:func:`plan_playback`, both pure. :class:`AudioController` owns the
playback handle and applies a plan without restarting a source that is
already loaded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import structlog

from idletycoon.database import GlobalConfig
from idletycoon.exceptions import PlaybackRejected
from idletycoon.settings import AppSettings

logger = structlog.get_logger()

DEFAULT_TRACK = "christmas"

BUILTIN_TRACKS: dict[str, str] = {
    "christmas": "https://rus.hitmotop.com/get/music/20150903/Wham_-_Last_Christmas_28464045.mp3",
    "koshak": "https://muzce.com/mp3/files/2025/12/28/koshak-obrygan.mp3",
    "tropical": "https://www.chosic.com/wp-content/uploads/2022/03/Luke-Bergs-Tropical-Soulmp3(chosic.com).mp3",
    "sneaky": "https://www.chosic.com/wp-content/uploads/2022/06/Sneaky-Snitch(chosic.com).mp3",
    "ohnonono": "https://track.pinkamuz.pro/download/33313731b1b43432358f373135b334b2b034310100/70c62cfe0f19741b50c20851ec0be7cb/DJ%20KVNXD%20-%20OH%20NO%20NO%20NO%20FUNK.mp3",
    "babylaugh": "https://ruo.morsmusic.org/load/2128882113/VHM4D_-_BABY_LAUGH_JERSEY_FUNK_(musmore.org).mp3",
}


def lookup_track(key: str, config: GlobalConfig) -> str | None:
    """Built-in table first, then visible custom tracks."""
    url = BUILTIN_TRACKS.get(key)
    if url:
        return url
    custom = config.find_custom_track(key)
    if custom is None or custom.is_hidden or not custom.url:
        return None
    return custom.url


def resolve_track(settings: AppSettings, config: GlobalConfig) -> str | None:
    """The URL that should be loaded, or None for silence.

    In global mode the admin's master switch and active track decide. A
    local selection ignores the master switch, but a hidden or deleted
    track still resolves to None.
    """
    if settings.follows_global:
        if not config.is_music_enabled:
            return None
        key = config.active_track or DEFAULT_TRACK
    else:
        key = settings.selected_track
    return lookup_track(key, config)


@dataclass(frozen=True)
class PlaybackIntent:
    source: str | None
    volume: float
    should_play: bool


def plan_playback(
    settings: AppSettings, config: GlobalConfig, logged_in: bool
) -> PlaybackIntent:
    source = resolve_track(settings, config)
    return PlaybackIntent(
        source=source,
        volume=settings.music_volume,
        should_play=bool(source) and logged_in and settings.enable_music,
    )


class AudioBackend(Protocol):
    """A looping player such as a browser audio element."""

    @property
    def source(self) -> str | None: ...

    @property
    def paused(self) -> bool: ...

    def load(self, url: str | None) -> None: ...

    def set_volume(self, volume: float) -> None: ...

    def play(self) -> None:
        """Start playback. May raise PlaybackRejected."""

    def pause(self) -> None: ...


class HeadlessAudioBackend:
    """In-memory backend for runs without a speaker.

    Set *reject_play* to emulate an autoplay policy refusing playback.
    """

    def __init__(self, reject_play: bool = False) -> None:
        self.reject_play = reject_play
        self.volume = 1.0
        self.play_calls = 0
        self._source: str | None = None
        self._paused = True

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def paused(self) -> bool:
        return self._paused

    def load(self, url: str | None) -> None:
        self._source = url
        self._paused = True

    def set_volume(self, volume: float) -> None:
        self.volume = volume

    def play(self) -> None:
        self.play_calls += 1
        if self.reject_play:
            raise PlaybackRejected("autoplay prevented")
        if self._source:
            self._paused = False

    def pause(self) -> None:
        self._paused = True


class AudioController:
    """Applies playback intents to an owned backend, idempotently."""

    def __init__(self, backend: AudioBackend | None = None) -> None:
        self.backend = backend if backend is not None else HeadlessAudioBackend()

    @property
    def playing(self) -> bool:
        return not self.backend.paused

    def set_source(self, url: str | None, resume: bool = True) -> bool:
        """Load *url* unless it is already loaded. Returns True on a switch.

        A switch keeps playing only if audio was playing and *resume* allows.
        """
        if (self.backend.source or None) == (url or None):
            return False
        if not url:
            self.backend.pause()
            self.backend.load(None)
            logger.info("audio stopped, no track")
            return True
        was_playing = self.playing
        self.backend.load(url)
        logger.info("audio source switched", url=url)
        if was_playing and resume:
            self._play()
        return True

    def set_volume(self, volume: float) -> None:
        self.backend.set_volume(min(1.0, max(0.0, volume)))

    def set_should_play(self, should_play: bool) -> None:
        if should_play:
            if self.backend.paused:
                self._play()
        elif not self.backend.paused:
            self.backend.pause()

    def apply(self, intent: PlaybackIntent) -> None:
        self.set_source(intent.source, resume=intent.should_play)
        self.set_volume(intent.volume)
        self.set_should_play(intent.should_play)

    def stop(self) -> None:
        self.set_should_play(False)

    def _play(self) -> None:
        try:
            self.backend.play()
        except PlaybackRejected as exc:
            logger.warning("playback rejected", error=str(exc))
