"""Collaborators guarded by the coordinator.

- speech: external speech commands run as cancellable subprocesses
- playback: cancellable wait on an audio sink
"""

from .playback import AudioSink, wait_for_playback
from .speech import run_speech_command

__all__ = [
    "AudioSink",
    "run_speech_command",
    "wait_for_playback",
]
