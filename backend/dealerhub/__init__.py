"""Dealerhub backend: tenant authorization and feature flags."""
