"""Cross-cutting infrastructure: settings, logging, database, audit log."""
