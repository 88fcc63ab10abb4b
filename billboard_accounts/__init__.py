"""Billboard Accounts: customer account statements for a billboard-advertising back office."""

__version__ = "0.1.0"
