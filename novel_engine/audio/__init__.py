"""
Audio output.
"""

from novel_engine.audio.player import MixerAudioPlayer

__all__ = ["MixerAudioPlayer"]
