"""
Broadcast Gateway.

Realtime WebSocket gateway that relays every client message to all other
connected clients.
"""

__version__ = "1.0.0"
