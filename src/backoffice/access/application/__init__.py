"""Application layer for the Access context: use-case services."""
