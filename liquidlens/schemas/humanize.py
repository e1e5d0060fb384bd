"""
API Schemas — Request and Response Models

Pydantic models for the LiquidLens API.
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field

from liquidlens.config import settings


# ============================================================
# HUMANIZE
# ============================================================

class HumanizeRequest(BaseModel):
    """POST /humanize request body."""
    text: str = Field(..., min_length=1, max_length=settings.MAX_TEXT_LENGTH,
                      description="Text containing template fragments.")
    mode: str = Field(settings.DISPLAY_MODE, pattern="^(friendly|technical)$",
                      description="Display mode: friendly (prose) or technical (near-verbatim).")

    model_config = {"json_schema_extra": {"examples": [
        {"text": "Hi {{first_name}}! {% if points > 100 %}You're a VIP.{% endif %}", "mode": "friendly"},
    ]}}


class HumanizeBatchRequest(BaseModel):
    """POST /humanize/batch request body."""
    items: list[HumanizeRequest] = Field(..., min_length=1, max_length=100)


class FragmentResponse(BaseModel):
    start: int
    end: int
    original: str
    clean: str
    type: str
    pattern: Optional[str] = None
    importance: str
    class_name: str
    tooltip: Optional[str] = None


class HumanizeResponse(BaseModel):
    """POST /humanize response body."""
    text: str
    mode: str
    matches: list[FragmentResponse]
    rendered: str
    display: dict = Field(default_factory=dict,
                          description="The mode's displayModes entry (name, showTooltips, ...).")
    styling: dict = Field(default_factory=dict,
                          description="Visual attributes for highlighted fragments in this mode.")
    catalog_version: int
    cached: bool = False


class HumanizeBatchResponse(BaseModel):
    """POST /humanize/batch response body."""
    results: list[HumanizeResponse]
    total: int


# ============================================================
# CATALOG
# ============================================================

class PatternInfo(BaseModel):
    name: str
    priority: int
    regex: str
    friendly: str = ""
    technical: str = ""
    placeholders: list[str] = []


class PatternsResponse(BaseModel):
    """GET /patterns response body."""
    patterns: list[PatternInfo]
    fallback_tag_patterns: list[str]
    total: int


class ReloadRequest(BaseModel):
    """POST /catalog/reload request body. No path reloads the current source."""
    path: Optional[str] = Field(None, min_length=1)


class CatalogSummary(BaseModel):
    source: str
    patterns_loaded: int
    patterns_dropped: int
    dropped: list[str]
    variables_loaded: int
    filters_loaded: int
    operators_loaded: int
    modes_available: int


class ReloadResponse(BaseModel):
    catalog_version: int
    summary: CatalogSummary


# ============================================================
# HEALTH
# ============================================================

class HealthResponse(BaseModel):
    status: str
    version: str
    core_version: str
    catalog_version: int
    patterns_loaded: int
    cache: dict
