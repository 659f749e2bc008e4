"""Built-in service launchers, one module per service."""
