"""Database driver connectors."""
