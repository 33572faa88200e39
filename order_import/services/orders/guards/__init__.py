from .duplicate_guard import DuplicateGuard

__all__ = ["DuplicateGuard"]
