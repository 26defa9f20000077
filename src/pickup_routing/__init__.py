"""Route planning service for donation pickups and deliveries."""

__version__ = "0.1.0"
