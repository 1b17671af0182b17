"""
Render Templates - Formats render-tree nodes as display fragments.

Each method rule becomes an ordered list of Segments. Segments carry no markup;
serializers turn them into an html fragment or an indented text outline, and
the Streamlit surface turns them into widgets.

Formatting order for a method rule:
1. name label
2. condition (trivial "true"/"false" marker, or an expandable "Condition")
3. "no content" marker, which ends the rule
4. documentation, expandable "Code", expandable "Method"
5. bracketed reference list, each reference carrying the rule's appId
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Literal

from backend.catalog.schemas import MethodRule
from backend.core.visualization.rule_tree import RuleTree

SegmentKind = Literal[
    "name",
    "trivial_condition",
    "condition",
    "no_content",
    "documentation",
    "code",
    "method",
    "references",
]

NO_CONTENT_TEXT = "[Rule has no content]"


@dataclass(frozen=True)
class Segment:
    """One display fragment of a method rule."""

    kind: SegmentKind
    text: str = ""
    references: tuple[str, ...] = ()
    app_id: str | None = None

    @property
    def is_expandable(self) -> bool:
        """Whether the segment is shown elided behind a label."""
        return self.kind in ("condition", "code", "method")

    @property
    def caption(self) -> str:
        """Label shown for expandable segments."""
        return {
            "condition": "Condition",
            "code": "Code",
            "method": "Method",
        }.get(self.kind, "")


class RenderTemplateEngine:
    """Maps render-tree nodes to segments and serialized fragments."""

    def method_segments(self, rule: MethodRule) -> list[Segment]:
        """Apply the formatting policy to a single method rule."""
        segments: list[Segment] = []

        if rule.name:
            segments.append(Segment("name", rule.name))

        if rule.condition:
            if rule.has_trivial_condition:
                segments.append(Segment("trivial_condition", rule.condition))
            else:
                segments.append(Segment("condition", rule.condition))

        if rule.no_content:
            segments.append(Segment("no_content", NO_CONTENT_TEXT))
            return segments

        if rule.documentation:
            segments.append(Segment("documentation", rule.documentation))
        if rule.code:
            segments.append(Segment("code", rule.code))
        if rule.method_name:
            segments.append(Segment("method", rule.method_name))

        if rule.ncubes:
            segments.append(
                Segment("references", references=tuple(rule.ncubes), app_id=rule.app_id)
            )

        return segments

    # -------------------------------------------------------------------------
    # HTML
    # -------------------------------------------------------------------------

    def segment_html(self, segment: Segment) -> str:
        text = escape(segment.text)
        if segment.kind == "name":
            return f'<span class="ruleName"><span>{text}</span>: </span>'
        if segment.kind == "trivial_condition":
            return f'<span class="conditionTrue">{text}</span>'
        if segment.kind == "condition":
            return (
                '<span class="ruleCondition conditionTip"><em>Condition</em>'
                f'<span class="conditionTipText">{text}</span></span>'
            )
        if segment.kind == "no_content":
            return f'<span class="noContent">{text}</span>'
        if segment.kind == "documentation":
            return f'<span class="docText">{text}</span>'
        if segment.kind == "code":
            return f'<span class="codeTip"><em>Code</em><span class="codeTipText">{text}</span></span>'
        if segment.kind == "method":
            return (
                '<span class="methodName conditionTip"><em>Method</em>'
                f'<span class="conditionTipText">{text}</span></span>'
            )
        app_id = escape(segment.app_id or "")
        links = ", ".join(
            f'<a class="ncubes" data-appId="{app_id}" href="#">{escape(name)}</a>'
            for name in segment.references
        )
        return f" [{links}]"

    def method_html(self, rule: MethodRule) -> str:
        body = "".join(self.segment_html(s) for s in self.method_segments(rule))
        return f'<span class="ruleMethod">{body}</span>'

    def render_html(self, tree: RuleTree) -> str:
        """Render the whole tree as a nested-list html fragment."""
        parts = ['<ul class="ruleList">']
        for group in tree.groups:
            parts.append('<li class="ruleGroup">')
            parts.append(
                f'<span class="ruleType">{escape(group.rule_type)}</span> '
                f'(<span class="className">{escape(group.class_name or "")}</span>)'
            )
            parts.append("<ul>")
            for obj in group.objects:
                parts.append('<li class="ruleGroup">')
                parts.append(f'<span class="ruleTitle">{escape(obj.name)}</span>')
                parts.append("<ul>")
                for method in obj.methods:
                    parts.append(f"<li>{self.method_html(method.rule)}</li>")
                parts.append("</ul></li>")
            parts.append("</ul></li>")
            parts.append('<hr class="ruleGroupSeparator">')
        parts.append("</ul>")
        return "".join(parts)

    # -------------------------------------------------------------------------
    # Plain text
    # -------------------------------------------------------------------------

    def segment_text(self, segment: Segment) -> str:
        if segment.kind == "name":
            return f"{segment.text}:"
        if segment.kind == "trivial_condition":
            return f"[{segment.text}]"
        if segment.is_expandable:
            return f"<{segment.caption}>"
        if segment.kind == "references":
            return "[" + ", ".join(segment.references) + "]"
        return segment.text

    def method_text(self, rule: MethodRule) -> str:
        return " ".join(self.segment_text(s) for s in self.method_segments(rule))

    def render_outline(self, tree: RuleTree, indent: str = "  ") -> str:
        """Render the tree as an indented plain-text outline."""
        lines = []
        for group in tree.groups:
            lines.append(group.label)
            for obj in group.objects:
                lines.append(f"{indent}{obj.name}")
                for method in obj.methods:
                    lines.append(f"{indent * 2}- {self.method_text(method.rule)}")
        return "\n".join(lines)


# =============================================================================
# Utility Functions
# =============================================================================


def method_segments(rule: MethodRule) -> list[Segment]:
    """Segments for one method rule."""
    return RenderTemplateEngine().method_segments(rule)


def render_html(tree: RuleTree) -> str:
    """Render a rule tree as an html fragment."""
    return RenderTemplateEngine().render_html(tree)


def render_outline(tree: RuleTree) -> str:
    """Render a rule tree as a plain-text outline."""
    return RenderTemplateEngine().render_outline(tree)
