"""composecli: a Compose-style command line for multi-service container projects."""

__version__ = "0.1.0"
