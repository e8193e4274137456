"""Monitoring sessions, the live sample window, and the foreground loop."""
