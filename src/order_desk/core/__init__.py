"""Configuration and durable storage."""
