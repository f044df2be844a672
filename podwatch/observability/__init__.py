"""Logging and Prometheus metrics for podwatch."""
