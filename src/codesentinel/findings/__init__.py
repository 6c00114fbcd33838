"""Finding normalization."""

from .normalizer import group_findings_by_path, normalize_finding, normalize_findings

__all__ = ["group_findings_by_path", "normalize_finding", "normalize_findings"]
