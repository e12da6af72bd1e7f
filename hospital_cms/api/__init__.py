"""HTTP API: versioned routers and shared error handling."""
