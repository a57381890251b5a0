"""HTTP layer over the feature adapters."""
