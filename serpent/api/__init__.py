"""HTTP and WebSocket surface for the game session."""
