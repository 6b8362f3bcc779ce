"""
Content units as produced by the segmentation collaborator. Read-only here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class UnitKind(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"


@dataclass(frozen=True)
class ContentUnit:
    id: str
    kind: UnitKind = UnitKind.PARAGRAPH
    expected_dwell_seconds: float = 0.0
    has_figure_reference: bool = False
