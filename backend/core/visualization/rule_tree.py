"""
Rule Tree - Converts rule documents to an ordered render tree.

This module transforms a RuleDocument (rule type -> objects -> method rules)
into a three-level tree of plain dataclasses. The builder is pure: it never
reorders, filters or deduplicates, so the tree mirrors payload order exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from backend.catalog.schemas import MethodRule, RuleDocument, RuleObject, RuleTypeEntry


# =============================================================================
# Data Classes for Tree Representation
# =============================================================================


@dataclass
class MethodNode:
    """A single method rule under an object."""

    id: str
    rule: MethodRule
    position: int = 0


@dataclass
class ObjectNode:
    """A rule object with its method rules in list order."""

    id: str
    name: str
    methods: list[MethodNode] = field(default_factory=list)


@dataclass
class RuleGroupNode:
    """A rule type heading, labeled with its implementation class."""

    id: str
    rule_type: str
    class_name: str | None = None
    objects: list[ObjectNode] = field(default_factory=list)

    @property
    def label(self) -> str:
        """Display label like 'ControlFlow (com.foo.Bar)'."""
        return f"{self.rule_type} ({self.class_name or ''})"


@dataclass
class RuleTree:
    """Complete render tree of a rule document."""

    groups: list[RuleGroupNode] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.groups

    @property
    def object_count(self) -> int:
        return sum(len(group.objects) for group in self.groups)

    @property
    def method_count(self) -> int:
        return sum(len(obj.methods) for _, obj in self.iter_objects())

    def iter_objects(self) -> Iterator[tuple[RuleGroupNode, ObjectNode]]:
        """Yield (group, object) pairs in display order."""
        for group in self.groups:
            for obj in group.objects:
                yield group, obj

    def iter_methods(self) -> Iterator[MethodNode]:
        """Yield every method node in display order."""
        for _, obj in self.iter_objects():
            yield from obj.methods

    def get_group(self, rule_type: str) -> RuleGroupNode | None:
        """Get a group node by rule type."""
        for group in self.groups:
            if group.rule_type == rule_type:
                return group
        return None


# =============================================================================
# Tree Builder
# =============================================================================


class RuleTreeBuilder:
    """Converts rule documents to render trees."""

    def build(self, document: RuleDocument) -> RuleTree:
        """Convert a rule document to a RuleTree.

        Args:
            document: Rule type name -> RuleTypeEntry, in display order

        Returns:
            RuleTree with one group node per rule type
        """
        tree = RuleTree()
        for index, (rule_type, entry) in enumerate(document.items()):
            tree.groups.append(self._build_group(f"g{index}", rule_type, entry))
        return tree

    def _build_group(self, node_id: str, rule_type: str, entry: RuleTypeEntry) -> RuleGroupNode:
        group = RuleGroupNode(
            id=node_id,
            rule_type=rule_type,
            class_name=entry.class_name,
        )
        for index, (name, rule_object) in enumerate(entry.objects.items()):
            group.objects.append(self._build_object(f"{node_id}/o{index}", name, rule_object))
        return group

    def _build_object(self, node_id: str, name: str, rule_object: RuleObject) -> ObjectNode:
        obj = ObjectNode(id=node_id, name=name)
        for position, rule in enumerate(rule_object.rules):
            obj.methods.append(
                MethodNode(id=f"{node_id}/m{position}", rule=rule, position=position)
            )
        return obj


# =============================================================================
# Utility Functions
# =============================================================================


def build_rule_tree(document: RuleDocument) -> RuleTree:
    """Convenience function to convert a rule document to a render tree."""
    return RuleTreeBuilder().build(document)
