"""Visualization module for rule documentation trees (canonical location)."""

from .rule_tree import (
    MethodNode,
    ObjectNode,
    RuleGroupNode,
    RuleTree,
    RuleTreeBuilder,
    build_rule_tree,
)

from .templates import (
    NO_CONTENT_TEXT,
    Segment,
    RenderTemplateEngine,
    method_segments,
    render_html,
    render_outline,
)

__all__ = [
    # Tree builder
    "MethodNode",
    "ObjectNode",
    "RuleGroupNode",
    "RuleTree",
    "RuleTreeBuilder",
    "build_rule_tree",
    # Templates
    "NO_CONTENT_TEXT",
    "Segment",
    "RenderTemplateEngine",
    "method_segments",
    "render_html",
    "render_outline",
]
