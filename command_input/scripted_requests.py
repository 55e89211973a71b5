"""
Scripted request source.

Plays back a fixed list of indexer requests, one per tick, for demos and
tests without a driver station.
"""

import logging
from typing import List, Optional

from indexer.types import IndexerRequest, Mode


logger = logging.getLogger(__name__)


class ScriptedRequests:
    """
    Request source that replays a script.

    After the script runs out the last request is repeated, so a short
    script holds its final mode.
    """

    def __init__(self, requests: Optional[List[Optional[IndexerRequest]]] = None) -> None:
        """
        Initialize scripted source.

        Args:
            requests: Requests to return in sequence. None entries are
                     ticks with no mode selected. An empty script always
                     returns None.
        """
        self._requests = requests or []
        self._index = 0
        self._running = False

    async def start(self) -> None:
        """Start the request source"""
        logger.info(f"[SCRIPT] Started ({len(self._requests)} requests)")
        self._running = True
        self._index = 0

    async def stop(self) -> None:
        """Stop the request source"""
        logger.info("[SCRIPT] Stopped")
        self._running = False

    async def read_request(self) -> Optional[IndexerRequest]:
        """Return next scripted request"""
        if not self._running or not self._requests:
            return None

        if self._index >= len(self._requests):
            return self._requests[-1]

        request = self._requests[self._index]
        self._index += 1
        return request

    def reset(self) -> None:
        """Reset to beginning of script"""
        self._index = 0

    def load_script(self, script_name: str) -> None:
        """
        Load a predefined script.

        Args:
            script_name: Name of script to load from RequestScripts
        """
        script_map = {
            "speaker": RequestScripts.speaker_feed(),
            "amp": RequestScripts.amp_handoff(),
            "source": RequestScripts.source_load(),
            "speaker_then_source": RequestScripts.speaker_then_source(),
        }

        if script_name in script_map:
            self._requests = script_map[script_name]
            logger.info(f"Loaded script '{script_name}' with {len(self._requests)} requests")
        else:
            logger.warning(f"Unknown script '{script_name}'")

    @property
    def is_running(self) -> bool:
        return self._running


class RequestScripts:
    """Pre-defined request scripts"""

    @staticmethod
    def speaker_feed() -> List[Optional[IndexerRequest]]:
        """Hold SPEAKER mode"""
        return [IndexerRequest(mode=Mode.SPEAKER)]

    @staticmethod
    def amp_handoff() -> List[Optional[IndexerRequest]]:
        """Hold AMP mode"""
        return [IndexerRequest(mode=Mode.AMP)]

    @staticmethod
    def source_load() -> List[Optional[IndexerRequest]]:
        """Source loading override on top of SPEAKER"""
        return [IndexerRequest(mode=Mode.SPEAKER, source_override=True)]

    @staticmethod
    def speaker_then_source() -> List[Optional[IndexerRequest]]:
        """A few idle ticks, SPEAKER for a while, then source loading"""
        return (
            [None] * 5
            + [IndexerRequest(mode=Mode.SPEAKER)] * 50
            + [IndexerRequest(mode=Mode.SPEAKER, source_override=True)]
        )
