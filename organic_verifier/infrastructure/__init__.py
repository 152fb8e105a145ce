"""Infrastructure adapters (logging, registry access)."""
