from pathstore.engine.store import Store

__all__ = ["Store"]
