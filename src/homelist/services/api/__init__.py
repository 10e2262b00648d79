"""HTTP clients for the Homelist task service."""
