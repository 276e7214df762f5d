"""Forge registry client."""
