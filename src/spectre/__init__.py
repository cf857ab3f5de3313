"""Spectre - Project delivery orchestration."""

__version__ = "0.1.0"
