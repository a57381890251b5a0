"""Core configuration and the feature store."""
