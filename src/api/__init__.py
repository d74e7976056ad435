"""HTTP and WebSocket surface of the session server."""
