"""Script Vault: credentials, sessions, access codes and script storage over a blob store."""

__version__ = "0.1.0"
