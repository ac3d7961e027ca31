"""HTTP server for the TaskNest store."""
