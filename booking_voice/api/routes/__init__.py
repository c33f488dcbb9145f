"""API Routes"""

from . import api_key, agents, calls, webhooks, health

__all__ = ["api_key", "agents", "calls", "webhooks", "health"]
