"""Analyze GitHub pull requests and report review metrics as JSON."""

__version__ = "0.1.0"
__all__ = ["analysis", "analyzer", "cli", "client", "types"]