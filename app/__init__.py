"""Vitals installer application package."""
