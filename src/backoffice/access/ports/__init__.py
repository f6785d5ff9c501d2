"""Ports for the Access context: repository and mail protocols, errors."""
