"""Real-time layer: event bus, presence registry, and WebSocket fan-out."""
