"""Infrastructure layer: persistence, transports and security helpers."""
