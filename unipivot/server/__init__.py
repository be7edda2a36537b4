"""UniPivot HTTP server."""
