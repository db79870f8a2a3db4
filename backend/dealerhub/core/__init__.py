"""Core services and infrastructure."""
