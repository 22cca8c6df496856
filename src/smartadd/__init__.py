"""smartadd: pick the files in a workspace that match a natural-language description."""

__version__ = "0.1.0"
