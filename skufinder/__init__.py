"""Azure VM SKU finder: retail prices merged with hardware capabilities."""

__version__ = "1.0.0"
