"""Core infrastructure: settings, configuration, broadcast channels, health probing."""
