"""HTTP API clients for the TaskNest server."""
