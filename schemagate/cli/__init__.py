"""Command implementations for the schemagate CLI."""
