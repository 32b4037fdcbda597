"""Swedish mortgage affordability and amortization calculator."""

__version__ = "0.1.0"
