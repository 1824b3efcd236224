"""Tokemak vault solvency health checks."""
