"""Operational command-line entrypoints."""
