"""
UI shared modules for the rule documentation browser.

This package contains the selection state machine, the page controller and
the Streamlit components that draw rule trees.
"""

from frontend.ui.selection import (
    CategoryFacet,
    InvalidSelectionError,
    SelectionState,
)
from frontend.ui.controller import (
    CrossReferenceResolver,
    TreeQuery,
    TreeSurface,
    UIController,
    ViewError,
    ViewHost,
    ViewSurface,
)
from frontend.ui.rule_tree_view import (
    SecondaryView,
    StreamlitTreeSurface,
    StreamlitViewHost,
    render_error,
    render_method,
    render_rule_tree,
    render_secondary_views,
)

__all__ = [
    # Selection
    "CategoryFacet",
    "InvalidSelectionError",
    "SelectionState",
    # Controller
    "CrossReferenceResolver",
    "TreeQuery",
    "TreeSurface",
    "UIController",
    "ViewError",
    "ViewHost",
    "ViewSurface",
    # Streamlit views
    "SecondaryView",
    "StreamlitTreeSurface",
    "StreamlitViewHost",
    "render_error",
    "render_method",
    "render_rule_tree",
    "render_secondary_views",
]
