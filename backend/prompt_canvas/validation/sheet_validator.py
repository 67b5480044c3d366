"""
Sheet Validator - reports structural problems in a sheet.

Catches issues like:
- Duplicate node or edge IDs
- Edges pointing at missing nodes
- Parent/attachment references to missing or wrong-type nodes
- Nested groups
- More than one active edge into a target
- Template values for parameters the template no longer has

Dangling references are tolerated at runtime; this module only reports them
(imported sheets are checked, and the HTTP host exposes the report).
"""

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional
import logging

from prompt_canvas.graph.types import GroupNode, ImageNode, NodeKind, Sheet, TemplateNode
from prompt_canvas.template.engine import extract_parameters

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    ERROR = "error"      # Invariant broken
    WARNING = "warning"  # Dangling reference, tolerated
    INFO = "info"        # Worth knowing


@dataclass
class ValidationIssue:
    """A single issue found in the sheet"""
    severity: ValidationSeverity
    code: str           # Machine-readable issue code
    message: str        # Human-readable description
    node_id: Optional[str] = None
    edge_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "node_id": self.node_id,
            "edge_id": self.edge_id,
        }


@dataclass
class SheetValidationResult:
    is_valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.WARNING)

    def codes(self) -> List[str]:
        return [i.code for i in self.issues]

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "issues": [i.to_dict() for i in self.issues],
            "stats": self.stats,
        }

    def get_summary(self) -> str:
        status = "valid" if self.is_valid else "invalid"
        return f"{status} | Errors: {self.error_count}, Warnings: {self.warning_count}"


class SheetValidator:
    """
    Usage:
        result = SheetValidator().validate(sheet)
        for issue in result.issues:
            print(f"[{issue.severity.value}] {issue.message}")
    """

    def validate(self, sheet: Sheet) -> SheetValidationResult:
        issues: List[ValidationIssue] = []
        issues.extend(self._check_duplicate_ids(sheet))
        issues.extend(self._check_edge_references(sheet))
        issues.extend(self._check_parents(sheet))
        issues.extend(self._check_attachments(sheet))
        issues.extend(self._check_branches(sheet))
        issues.extend(self._check_template_values(sheet))
        issues.extend(self._check_self_loops(sheet))

        result = SheetValidationResult(
            is_valid=not any(i.severity == ValidationSeverity.ERROR for i in issues),
            issues=issues,
            stats={
                "nodes": len(sheet.nodes),
                "edges": len(sheet.edges),
                "active_edges": sum(1 for e in sheet.edges if e.active),
                "groups": sum(1 for n in sheet.nodes if n.is_group),
            },
        )
        logger.debug("Sheet %s validation: %s", sheet.id, result.get_summary())
        return result

    def _check_duplicate_ids(self, sheet: Sheet) -> List[ValidationIssue]:
        issues = []
        node_counts: Dict[str, int] = defaultdict(int)
        for node in sheet.nodes:
            node_counts[node.id] += 1
        for node_id, count in node_counts.items():
            if count > 1:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="DUPLICATE_NODE_ID",
                    message=f"Node ID '{node_id}' appears {count} times",
                    node_id=node_id,
                ))

        edge_counts: Dict[str, int] = defaultdict(int)
        for edge in sheet.edges:
            edge_counts[edge.id] += 1
        for edge_id, count in edge_counts.items():
            if count > 1:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="DUPLICATE_EDGE_ID",
                    message=f"Edge ID '{edge_id}' appears {count} times",
                    edge_id=edge_id,
                ))
        return issues

    def _check_edge_references(self, sheet: Sheet) -> List[ValidationIssue]:
        issues = []
        node_ids = sheet.node_ids()
        for edge in sheet.edges:
            for role, node_id in (("source", edge.source), ("target", edge.target)):
                if node_id not in node_ids:
                    issues.append(ValidationIssue(
                        severity=ValidationSeverity.WARNING,
                        code=f"MISSING_{role.upper()}_NODE",
                        message=f"Edge references non-existent {role} node '{node_id}'",
                        edge_id=edge.id,
                    ))
        return issues

    def _check_parents(self, sheet: Sheet) -> List[ValidationIssue]:
        issues = []
        for node in sheet.nodes:
            if node.parent_group_id is None:
                continue
            if node.is_group:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="NESTED_GROUP",
                    message=f"Group '{node.id}' has a parent group",
                    node_id=node.id,
                ))
                continue
            parent = sheet.get_node(node.parent_group_id)
            if not isinstance(parent, GroupNode):
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="INVALID_PARENT",
                    message=f"Node '{node.id}' names '{node.parent_group_id}' as parent, which is not a group",
                    node_id=node.id,
                ))
        return issues

    def _check_attachments(self, sheet: Sheet) -> List[ValidationIssue]:
        issues = []
        for node in sheet.nodes:
            if not isinstance(node, ImageNode) or node.attached_to is None:
                continue
            target = sheet.get_node(node.attached_to)
            if target is None or target.kind is NodeKind.IMAGE:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="INVALID_ATTACHMENT",
                    message=f"Image '{node.id}' is attached to missing or image node '{node.attached_to}'",
                    node_id=node.id,
                ))
        return issues

    def _check_branches(self, sheet: Sheet) -> List[ValidationIssue]:
        issues = []
        active_into: Dict[str, int] = defaultdict(int)
        for edge in sheet.edges:
            if edge.active:
                active_into[edge.target] += 1
        for target, count in active_into.items():
            if count > 1:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MULTIPLE_ACTIVE_BRANCHES",
                    message=f"Node '{target}' has {count} active incoming edges",
                    node_id=target,
                ))
        return issues

    def _check_template_values(self, sheet: Sheet) -> List[ValidationIssue]:
        issues = []
        for node in sheet.nodes:
            if not isinstance(node, TemplateNode):
                continue
            stale = set(node.values) - set(extract_parameters(node.template))
            if stale:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.INFO,
                    code="STALE_TEMPLATE_VALUES",
                    message=f"Template '{node.id}' has values for unknown parameters {sorted(stale)}",
                    node_id=node.id,
                ))
        return issues

    def _check_self_loops(self, sheet: Sheet) -> List[ValidationIssue]:
        return [
            ValidationIssue(
                severity=ValidationSeverity.INFO,
                code="SELF_LOOP",
                message=f"Edge connects node '{edge.source}' to itself",
                edge_id=edge.id,
            )
            for edge in sheet.edges
            if edge.source == edge.target
        ]


def validate_sheet(sheet: Sheet) -> SheetValidationResult:
    return SheetValidator().validate(sheet)
