"""Concrete adapters for the service-layer ports, plus the composition root."""
