"""Core infrastructure: configuration, logging, request context and security."""
