"""HTTP and WebSocket surface for Mafia rooms."""
