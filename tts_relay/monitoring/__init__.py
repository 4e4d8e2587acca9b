"""Prometheus metrics for the relay."""
