"""Infrastructure adapters for the Access context."""
