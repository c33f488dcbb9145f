"""API module"""

from .routes import api_key, agents, calls, webhooks, health

__all__ = ["api_key", "agents", "calls", "webhooks", "health"]
