"""Address index for the PIVX chain."""

__version__ = "0.1.0"
