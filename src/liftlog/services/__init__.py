"""Plan editing services."""
