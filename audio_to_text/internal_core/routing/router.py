from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..config import TranscriberConfig
from ..errors import SubprocessFailure
from ..process import CommandRunner, run_command
from .pulse_modules import (
    NULL_SINK_MODULE,
    REMAP_SOURCE_MODULE,
    PulseModule,
    find_module,
    find_module_by_index,
    parse_short_modules,
)

logger = logging.getLogger(__name__)


@dataclass
class RoutingState:
    speaker_device: str = "virtual_speaker"
    microphone_device: str = "virtual_microphone"
    speaker_monitor: str = "virtual_speaker.monitor"
    original_default_source: Optional[str] = None
    null_sink_module_id: Optional[int] = None
    remap_source_module_id: Optional[int] = None


class AudioRouter:
    """
    Owns one virtual speaker (null sink) and one virtual microphone (remap source
    reading the speaker's monitor) on the PulseAudio server.

    `setup` and `teardown` are paired; `teardown` is safe to call any number of
    times, with or without a prior `setup`.
    """

    def __init__(self, pactl_bin: str = "pactl", runner: Optional[CommandRunner] = None):
        self._pactl = pactl_bin
        self._run = runner or run_command
        self.state = RoutingState()

    @classmethod
    def from_config(
        cls, cfg: TranscriberConfig, runner: Optional[CommandRunner] = None
    ) -> "AudioRouter":
        return cls(cfg.ATT_PACTL_BIN, runner=runner)

    def _pactl_cmd(self, *args: str) -> str:
        return self._run([self._pactl, *args])

    def list_modules(self) -> List[PulseModule]:
        return parse_short_modules(self._pactl_cmd("list", "short", "modules"))

    def get_default_source(self) -> Optional[str]:
        name = self._pactl_cmd("get-default-source").strip()
        return name or None

    def _load_module(self, *args: str) -> int:
        raw = self._pactl_cmd("load-module", *args)
        try:
            return int(raw.strip())
        except ValueError as e:
            raise SubprocessFailure(
                "SUBPROCESS_OUTPUT_INVALID",
                f"pactl load-module {args[0]} returned an unexpected module id: {raw!r}",
                cmd=[self._pactl, "load-module", *args],
            ) from e

    def setup(self, speaker_device: str, microphone_device: str) -> RoutingState:
        state = self.state
        state.speaker_device = speaker_device
        state.microphone_device = microphone_device

        state.original_default_source = self.get_default_source()
        if state.original_default_source:
            logger.info("Original default source: %s", state.original_default_source)
        else:
            logger.info("No original default source detected.")

        state.speaker_monitor = f"{speaker_device}.monitor"

        existing_sink = find_module(
            self.list_modules(), NULL_SINK_MODULE, sink_name=speaker_device
        )
        if existing_sink is not None:
            state.null_sink_module_id = existing_sink.index
        else:
            logger.info("Loading %s (sink_name=%s)", NULL_SINK_MODULE, speaker_device)
            state.null_sink_module_id = self._load_module(
                NULL_SINK_MODULE, f"sink_name={speaker_device}"
            )

        existing_source = find_module(
            self.list_modules(), REMAP_SOURCE_MODULE, source_name=microphone_device
        )
        if existing_source is not None:
            state.remap_source_module_id = existing_source.index
        else:
            logger.info("Loading %s (source_name=%s)", REMAP_SOURCE_MODULE, microphone_device)
            state.remap_source_module_id = self._load_module(
                REMAP_SOURCE_MODULE,
                f"master={state.speaker_monitor}",
                f"source_name={microphone_device}",
            )

        if state.original_default_source != microphone_device:
            logger.info("Setting default source to %s", microphone_device)
            self._pactl_cmd("set-default-source", microphone_device)

        logger.info("Virtual speaker and microphone setup complete.")
        return state

    def _restore_default_source(self) -> None:
        state = self.state
        if not state.original_default_source:
            return
        original, state.original_default_source = state.original_default_source, None
        self._pactl_cmd("set-default-source", original)
        logger.info("Restored original default source: %s", original)

    def _unload_remap_source(self) -> None:
        state = self.state
        if state.remap_source_module_id is None:
            return
        module_id, state.remap_source_module_id = state.remap_source_module_id, None
        still_loaded = find_module_by_index(
            self.list_modules(),
            module_id,
            REMAP_SOURCE_MODULE,
            master=state.speaker_monitor,
            source_name=state.microphone_device,
        )
        if still_loaded is not None:
            self._pactl_cmd("unload-module", str(still_loaded.index))
            logger.info("Unloaded %s: %s", REMAP_SOURCE_MODULE, still_loaded.index)

    def _unload_null_sink(self) -> None:
        state = self.state
        if state.null_sink_module_id is None:
            return
        module_id, state.null_sink_module_id = state.null_sink_module_id, None
        still_loaded = find_module_by_index(
            self.list_modules(),
            module_id,
            NULL_SINK_MODULE,
            sink_name=state.speaker_device,
        )
        if still_loaded is not None:
            self._pactl_cmd("unload-module", str(still_loaded.index))
            logger.info("Unloaded %s: %s", NULL_SINK_MODULE, still_loaded.index)

    def teardown(self) -> None:
        # Every step runs even if an earlier one fails; the first failure is re-raised.
        # The listing is re-read before each unload; modules may have been removed externally.
        first_error: Optional[SubprocessFailure] = None
        for step in (self._restore_default_source, self._unload_remap_source, self._unload_null_sink):
            try:
                step()
            except SubprocessFailure as e:
                logger.error("Audio routing teardown step %s failed: %s", step.__name__, e.message)
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error
