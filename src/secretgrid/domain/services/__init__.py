from .detail import format_detail_value
from .filtering import apply_filter
from .layout import compute_for, compute_grid_shape
from .navigation import NavigationState

__all__ = ["NavigationState", "apply_filter", "format_detail_value", "compute_for", "compute_grid_shape"]
