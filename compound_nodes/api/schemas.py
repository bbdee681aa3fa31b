"""Request and response models for the hierarchy endpoints."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class NoteNodeIn(BaseModel):
    id: str = Field(..., min_length=1, description="Node identity")
    path: Optional[str] = Field(None, description="Note path; defaults to '<id>.md'")
    label: Optional[str] = Field(None, description="Display label")
    parent: Optional[Any] = Field(None, description="Raw parent declaration, e.g. '[[Parent]]'")

    @model_validator(mode="after")
    def _default_path(self) -> "NoteNodeIn":
        if self.path is None:
            self.path = f"{self.id}.md"
        return self


class LinkEdgeIn(BaseModel):
    source: str
    target: str
    id: Optional[str] = None


class HierarchyRequest(BaseModel):
    nodes: List[NoteNodeIn] = Field(default_factory=list)
    edges: List[LinkEdgeIn] = Field(default_factory=list)
    aliases: Dict[str, str] = Field(default_factory=dict, description="Extra link text -> node id mappings")


class VaultHierarchyRequest(BaseModel):
    path: Path


class NodeOut(BaseModel):
    id: str
    label: str
    path: Optional[str] = None
    parent: Optional[str] = None
    depth: int
    classes: List[str]
    is_placeholder: bool


class EdgeOut(BaseModel):
    id: str
    source: str
    target: str
    classes: List[str]


class BuildSummary(BaseModel):
    attached: int
    skipped: int
    rejected: int
    failed: int
    placeholders: List[str]
    tagged_edges: int
    cycle_members: List[str]
    duration_seconds: float


class HierarchyResponse(BaseModel):
    nodes: List[NodeOut]
    edges: List[EdgeOut]
    summary: BuildSummary
