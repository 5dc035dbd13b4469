from .models import GridShape, Item, LayoutConstraints, RemotePage

__all__ = ["GridShape", "Item", "LayoutConstraints", "RemotePage"]
