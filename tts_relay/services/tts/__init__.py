"""
Text-to-speech services.

Provides the provider client, the in-flight registry that collapses
duplicate downloads, and the fetch orchestrator.
"""

from .inflight import InFlightRegistry
from .orchestrator import TTSFetchOrchestrator
from .provider_client import TTSProviderClient

__all__ = [
    "InFlightRegistry",
    "TTSFetchOrchestrator",
    "TTSProviderClient",
]
