"""View models for controller outputs."""

from suggestion_lifecycle.domain.views.ui_state import UIState, LifecycleSnapshot

__all__ = [
    "UIState",
    "LifecycleSnapshot",
]
