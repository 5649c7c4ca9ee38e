"""Store Rating API."""
