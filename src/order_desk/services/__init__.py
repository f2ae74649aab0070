"""Session, routing, caching and aggregate services."""
