"""Observability for cross-cutting infrastructure."""

from infrastructure.observability.probes import ConnectionProbe, DefaultConnectionProbe

__all__ = ["ConnectionProbe", "DefaultConnectionProbe"]
