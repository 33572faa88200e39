from .draft_order_builder import DraftOrderBuilder

__all__ = ["DraftOrderBuilder"]
