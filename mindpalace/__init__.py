"""Mind Palace - local-first shelf collections with durable write-through."""

__version__ = "1.0.0"
