"""
Rule Documentation - browse rules by engine, group or category.

Pick an engine, then either a group or a set of category values; the rules
matching the selection are shown as a tree. Referenced rule sets open as tabs
below the tree.

Run from repo root:
    streamlit run frontend/Home.py
"""

import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio

import streamlit as st

from backend.core.config import configure_logging
from frontend.helpers.rules_client import get_rules_client
from frontend.ui.controller import UIController
from frontend.ui.rule_tree_view import (
    StreamlitTreeSurface,
    StreamlitViewHost,
    render_error,
    render_rule_tree,
    render_secondary_views,
)

configure_logging()

# -----------------------------------------------------------------------------
# Page Configuration
# -----------------------------------------------------------------------------

st.set_page_config(
    page_title="Rule Documentation",
    page_icon="📚",
    layout="wide",
)

# -----------------------------------------------------------------------------
# Session State
# -----------------------------------------------------------------------------

if "rule_controller" not in st.session_state:
    surface = StreamlitTreeSurface()
    host = StreamlitViewHost()
    controller = UIController(get_rules_client(), surface, host)
    st.session_state.rule_surface = surface
    st.session_state.rule_host = host
    st.session_state.rule_controller = controller
    asyncio.run(controller.load())

controller: UIController = st.session_state.rule_controller
surface: StreamlitTreeSurface = st.session_state.rule_surface
host: StreamlitViewHost = st.session_state.rule_host
state = controller.state


def group_key() -> str:
    return f"group_select::{state.engine}"


def category_key(name: str) -> str:
    return f"category::{state.engine}::{name}"


# -----------------------------------------------------------------------------
# Callbacks
# -----------------------------------------------------------------------------


def on_engine_change() -> None:
    asyncio.run(controller.select_engine(st.session_state.engine_select))


def on_group_change() -> None:
    # Selecting a group drops the applied category filter
    for facet in state.category_facets:
        st.session_state[category_key(facet.name)] = []
    asyncio.run(controller.select_group(st.session_state[group_key()]))


def on_apply_filter() -> None:
    surface.form_values = {
        facet.name: st.session_state.get(category_key(facet.name), [])
        for facet in state.category_facets
    }
    # Group and category queries never combine
    st.session_state[group_key()] = ""
    asyncio.run(controller.apply_category_filter())


def on_retry() -> None:
    asyncio.run(controller.retry())


def on_reference(name: str, app_id: str) -> None:
    asyncio.run(controller.activate_reference(name, app_id))


# -----------------------------------------------------------------------------
# Header
# -----------------------------------------------------------------------------

st.title("Rule Documentation")

if not state.loaded:
    if surface.error:
        render_error(surface.error, on_retry=on_retry)
    st.stop()

if not state.engines:
    st.info("The rules server has no engines configured.")
    st.stop()

# -----------------------------------------------------------------------------
# Selectors
# -----------------------------------------------------------------------------

col1, col2 = st.columns(2)

with col1:
    st.selectbox(
        "Engine",
        options=state.engines,
        index=state.engines.index(state.engine),
        key="engine_select",
        on_change=on_engine_change,
    )

with col2:
    st.selectbox(
        "Group",
        options=state.group_options,
        format_func=lambda g: g or "(select a group)",
        key=group_key(),
        on_change=on_group_change,
    )

if state.show_category_form:
    with st.form("category_form"):
        st.caption("Or filter by category")
        for facet in state.category_facets:
            st.multiselect(facet.name, options=facet.values, key=category_key(facet.name))
        st.form_submit_button("Filter rules", on_click=on_apply_filter)

st.divider()

# -----------------------------------------------------------------------------
# Rule Tree
# -----------------------------------------------------------------------------

if surface.error:
    render_error(surface.error, on_retry=on_retry)
elif surface.tree is not None:
    render_rule_tree(surface.tree, surface.templates, on_reference=on_reference)

if controller.resolver.last_error:
    st.warning(f"{controller.resolver.last_error.title}: {controller.resolver.last_error.message}")

render_secondary_views(host)
