"""Read-only HTTP API over the context store."""
