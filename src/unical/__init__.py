"""unical - unified activity and appointment calendar engine."""

__version__ = "0.1.0"
