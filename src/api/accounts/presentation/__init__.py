"""HTTP presentation layer for the accounts bounded context."""
