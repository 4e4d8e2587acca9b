"""Domain models for the TTS relay."""
