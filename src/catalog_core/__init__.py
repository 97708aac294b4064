# core package for the game catalog
from . import catalog_client, parser, store, sync, token_provider, token_store

__all__ = ["catalog_client", "parser", "store", "sync", "token_provider", "token_store"]
