"""Background services and service-layer operations."""
