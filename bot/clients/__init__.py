"""Exchange clients."""

from bot.clients.bitvavo_rest import BitvavoRestClient, CachedBookSource

__all__ = ["BitvavoRestClient", "CachedBookSource"]
