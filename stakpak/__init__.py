"""Configuration, local context, flow edits, workspace sync and shell actions for Stakpak."""

__version__ = "0.1.96"