"""Domain layer for the Access context: pure rules, no I/O."""
