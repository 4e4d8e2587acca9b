"""Core configuration, logging, errors and process wiring."""
