"""
Rule tree view - Streamlit materialization of rule trees and secondary views.

The controller talks to a TreeSurface and a ViewHost. Streamlit redraws the
page on every interaction, so both keep what should be shown and the page
draws it with the render_* functions below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import streamlit as st
import streamlit.components.v1 as components

from backend.core.visualization import (
    MethodNode,
    RenderTemplateEngine,
    RuleTree,
    Segment,
)
from frontend.ui.controller import ViewError, ViewKey
from frontend.ui.selection import SelectionState

ReferenceHandler = Callable[[str, str], None]


# =============================================================================
# Surfaces
# =============================================================================


class StreamlitTreeSurface:
    """TreeSurface holding the selectors, tree and error for the next redraw."""

    def __init__(self, templates: RenderTemplateEngine | None = None) -> None:
        self.templates = templates or RenderTemplateEngine()
        self.state: SelectionState | None = None
        self.tree: RuleTree | None = None
        self.error: ViewError | None = None
        self.form_values: dict[str, list[str]] = {}

    def show_selectors(self, state: SelectionState) -> None:
        self.state = state
        self.form_values = {}

    def read_category_form(self) -> dict[str, list[str]]:
        return {name: list(values) for name, values in self.form_values.items()}

    def clear(self) -> None:
        self.tree = None
        self.error = None

    def render(self, tree: RuleTree) -> None:
        self.tree = tree

    def show_error(self, error: ViewError) -> None:
        self.error = error


@dataclass
class SecondaryView:
    """A named secondary view holding pre-rendered html."""

    key: ViewKey
    html: str = ""
    writes: int = 0

    @property
    def title(self) -> str:
        name, app_id = self.key
        return f"{name} [{app_id}]"

    def write(self, html: str) -> None:
        self.html = html
        self.writes += 1


@dataclass
class StreamlitViewHost:
    """ViewHost keeping one SecondaryView per key."""

    views: dict[ViewKey, SecondaryView] = field(default_factory=dict)

    def open_or_reuse(self, key: ViewKey) -> SecondaryView:
        if key not in self.views:
            self.views[key] = SecondaryView(key=key)
        return self.views[key]

    def close(self, key: ViewKey) -> None:
        self.views.pop(key, None)


# =============================================================================
# Rendering
# =============================================================================


def render_method(
    node: MethodNode,
    templates: RenderTemplateEngine,
    on_reference: ReferenceHandler | None = None,
) -> None:
    """Render one method rule, segment by segment in formatting order.

    Consecutive inline segments share one markdown run; annotations and the
    reference list are emitted where they fall in the sequence.
    """
    inline: list[Segment] = []
    for segment in templates.method_segments(node.rule):
        if not segment.is_expandable and segment.kind != "references":
            inline.append(segment)
            continue

        _render_inline(inline, templates)
        inline = []
        if segment.kind == "references":
            _render_references(node, segment, on_reference)
        else:
            _render_annotation(segment)
    _render_inline(inline, templates)


def _render_inline(segments: list[Segment], templates: RenderTemplateEngine) -> None:
    if segments:
        st.markdown(
            "".join(templates.segment_html(s) for s in segments),
            unsafe_allow_html=True,
        )


def _render_annotation(segment: Segment) -> None:
    # Expanders cannot nest, annotations open as popovers inside the group expander
    with st.popover(segment.caption):
        if segment.kind == "code":
            st.code(segment.text)
        else:
            st.text(segment.text)


def _render_references(
    node: MethodNode,
    segment: Segment,
    on_reference: ReferenceHandler | None,
) -> None:
    """Bracketed, comma-separated row of reference buttons."""
    names = segment.references
    cols = st.columns(len(names) + 2, vertical_alignment="center")
    with cols[0]:
        st.markdown("[")
    for i, (col, name) in enumerate(zip(cols[1:], names)):
        with col:
            st.button(
                name,
                key=f"ref::{node.id}::{i}",
                type="tertiary",
                on_click=on_reference,
                args=(name, segment.app_id or ""),
                disabled=on_reference is None,
            )
            if i < len(names) - 1:
                st.markdown(",")
    with cols[-1]:
        st.markdown("]")


def render_rule_tree(
    tree: RuleTree,
    templates: RenderTemplateEngine | None = None,
    on_reference: ReferenceHandler | None = None,
) -> None:
    """Render a rule tree as nested Streamlit expandables."""
    templates = templates or RenderTemplateEngine()

    if tree.is_empty:
        st.info("No rules match the current selection.")
        return

    for group in tree.groups:
        with st.expander(group.label, expanded=True):
            for obj in group.objects:
                st.markdown(f"**{obj.name}**")
                for method in obj.methods:
                    render_method(method, templates, on_reference)
        st.divider()


def render_error(error: ViewError, on_retry: Callable[[], None] | None = None) -> None:
    """Show a failed request with a retry button."""
    st.error(f"{error.title}: {error.message}")
    if error.retryable and on_retry is not None:
        st.button("Retry", key="rule_browser_retry", on_click=on_retry)


def render_secondary_views(host: StreamlitViewHost, height: int = 600) -> None:
    """Show opened reference views as tabs."""
    if not host.views:
        return
    views = list(host.views.values())
    tabs = st.tabs([view.title for view in views])
    for tab, view in zip(tabs, views):
        with tab:
            components.html(view.html, height=height, scrolling=True)
            st.button("Close", key=f"close::{view.title}", on_click=host.close, args=(view.key,))
