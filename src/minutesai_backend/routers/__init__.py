# Router modules are exported here for easier access.

from . import flows, health, videos

__all__ = ["flows", "health", "videos"]
