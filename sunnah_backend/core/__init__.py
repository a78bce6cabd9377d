"""Core application infrastructure: configuration, logging, metrics, lifecycle."""
