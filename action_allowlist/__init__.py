"""Build GitHub Actions allowlists from the references used across template repositories."""

__version__ = "0.1.0"
