"""Azure Notification Hubs samples driven by timer and queue triggers."""

__version__ = "0.1.0"
