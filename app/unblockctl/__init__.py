"""unblockctl - find and clear the Mark of the Web on trusted files."""

__version__ = "0.1.0"
