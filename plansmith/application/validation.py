"""Validation service.

Checks a test definition against the known task types and reports findings.
Findings never block editing; they are shown next to the tasks they name.
"""

from typing import Literal

from pydantic import BaseModel

from plansmith.domain.descriptors import DescriptorRegistry
from plansmith.domain.task import ForestKind, TestConfig, flatten

Severity = Literal["error", "warning"]


class ValidationFinding(BaseModel):
    """One problem found in a test definition.

    ``task_id`` names the offending task (None for test-level findings) and
    ``field`` the offending field, when there is one.
    """

    message: str
    severity: Severity = "error"
    task_id: str | None = None
    field: str | None = None

    model_config = {"frozen": True}


def has_errors(findings: list[ValidationFinding]) -> bool:
    return any(finding.severity == "error" for finding in findings)


def validate_test(
    config: TestConfig,
    registry: DescriptorRegistry,
    for_save: bool = False,
) -> list[ValidationFinding]:
    """Validate a test definition.

    Args:
        config: The test definition
        registry: Known task types
        for_save: Also require what saving needs (a test id)

    Returns:
        Findings in a stable order: test-level first, then tasks in
        main-forest then cleanup-forest pre-order.
    """
    findings: list[ValidationFinding] = []

    if not config.name or not config.name.strip():
        findings.append(ValidationFinding(message="Test name is required", field="name"))
    if for_save and not config.id:
        findings.append(ValidationFinding(message="Test id is required to save", field="id"))
    if not config.tasks:
        findings.append(
            ValidationFinding(message="Test must have at least one task", severity="warning")
        )

    seen_task_ids: dict[str, str] = {}
    for kind in ForestKind:
        for node in flatten(config.forest(kind)):
            if node.task_type not in registry:
                findings.append(
                    ValidationFinding(
                        message=f"Unknown task type: {node.task_type}",
                        task_id=node.id,
                        field="task_type",
                    )
                )
            if node.task_id:
                if node.task_id in seen_task_ids:
                    findings.append(
                        ValidationFinding(
                            message=f"Task id '{node.task_id}' is used more than once",
                            severity="warning",
                            task_id=node.id,
                            field="task_id",
                        )
                    )
                else:
                    seen_task_ids[node.task_id] = node.id

    return findings
