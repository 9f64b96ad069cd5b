# Export all routers
from . import contact, health

__all__ = ["contact", "health"]
