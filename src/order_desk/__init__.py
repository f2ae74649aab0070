"""Session, access control and cached data layer for the order-management dashboard."""
