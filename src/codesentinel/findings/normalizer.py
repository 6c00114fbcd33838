"""Convert loosely-shaped analyzer output into validated ``Finding`` records."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Mapping
from typing import Any

from codesentinel.constants.findings import LINE_KEYS, PATH_KEYS, RULE_ID_KEYS, TITLE_KEYS, UNTITLED_FINDING
from codesentinel.constants.ids import FINDING_ID_HEX_LENGTH, FINDING_ID_PREFIX
from codesentinel.exceptions import ValidationError
from codesentinel.model import Finding
from codesentinel.severity import parse_severity
from codesentinel.tree.builder import split_path


def normalize_finding(raw: Any) -> Finding:
    """Validate one raw finding and return its canonical form.

    Raises ValidationError when the record is not a mapping, lacks a file
    path or severity, carries an unrecognized severity, or has a path that
    is not a canonical relative ``/``-separated path.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError(f"finding must be a mapping, got {type(raw).__name__}")

    file_path = _first_present(raw, PATH_KEYS)
    if file_path is None:
        raise ValidationError("finding is missing required field 'filePath'")
    if not isinstance(file_path, str) or not file_path.strip():
        raise ValidationError("finding field 'filePath' must be a non-empty string")
    file_path = file_path.strip()
    split_path(file_path)

    if raw.get("severity") is None:
        raise ValidationError(f"finding for {file_path!r} is missing required field 'severity'")
    severity = parse_severity(raw["severity"])

    title = _optional_text(_first_present(raw, TITLE_KEYS), "title") or UNTITLED_FINDING
    description = _optional_text(raw.get("description"), "description")
    line = _optional_line(_first_present(raw, LINE_KEYS))
    rule_id = _optional_text(_first_present(raw, RULE_ID_KEYS), "ruleId") or None

    finding_id = raw.get("id")
    if finding_id is None or (isinstance(finding_id, str) and not finding_id.strip()):
        finding_id = _derive_finding_id(file_path, severity, title, description, line, rule_id)
    elif not isinstance(finding_id, (str, int)) or isinstance(finding_id, bool):
        raise ValidationError("finding field 'id' must be a string")

    return Finding(
        id=str(finding_id),
        file_path=file_path,
        severity=severity,
        title=title,
        description=description,
        line=line,
        rule_id=rule_id,
    )


def normalize_findings(raws: Iterable[Any]) -> list[Finding]:
    """Normalize a batch of raw findings, failing on the first invalid record."""
    return [normalize_finding(raw) for raw in raws]


def group_findings_by_path(findings: Iterable[Finding]) -> dict[str, tuple[Finding, ...]]:
    """Group findings by file path, preserving input order within each path."""
    grouped: dict[str, list[Finding]] = {}
    for finding in findings:
        grouped.setdefault(finding.file_path, []).append(finding)
    return {path: tuple(items) for path, items in grouped.items()}


def _first_present(raw: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _optional_text(value: Any, field_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"finding field '{field_name}' must be a string")
    return value.strip()


def _optional_line(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"finding field 'line' must be a positive integer, got {value!r}")
    return value


def _derive_finding_id(
    file_path: str,
    severity: str,
    title: str,
    description: str,
    line: int | None,
    rule_id: str | None,
) -> str:
    identity = "|".join([file_path, severity, title, description, str(line), rule_id or ""])
    digest = hashlib.sha256(identity.encode("utf-8")).hexdigest()[:FINDING_ID_HEX_LENGTH]
    return f"{FINDING_ID_PREFIX}{digest}"
