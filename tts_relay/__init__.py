"""
TTS Relay

Fetches speech audio for a word from a text-to-speech provider, keeps it in
a transient on-disk cache and hands back the URL to play.
"""

from .constants import APP_VERSION

__version__ = APP_VERSION
