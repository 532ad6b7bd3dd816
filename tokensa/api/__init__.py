"""HTTP API for the Tokensa local server."""
