"""create-openfort -- scaffold a new Openfort project from a remote template."""

__version__ = "0.1.0"
