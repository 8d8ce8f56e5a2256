"""Two-tier TTL cache for the archi content platform."""
