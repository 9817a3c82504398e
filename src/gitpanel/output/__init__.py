"""Renderers for terminal, JSON and YAML output."""
