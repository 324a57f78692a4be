"""Image storage backends."""

from storage.local import LocalImageStorage

__all__ = ["LocalImageStorage"]
