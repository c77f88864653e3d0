"""CreditDesk: credit application wizard and amortization engine."""

__version__ = "1.0.0"
