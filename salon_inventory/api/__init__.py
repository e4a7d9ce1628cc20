"""HTTP API for the salon inventory service."""
