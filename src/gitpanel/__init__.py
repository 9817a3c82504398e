"""gitpanel — git status, diff and change watching for a working tree."""

__version__ = "0.1.0"
