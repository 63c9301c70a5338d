"""
Pydantic v2 schemas for request validation and response serialisation.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Render
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class RenderFileRequest(BaseModel):
    template: str = Field(..., min_length=1, max_length=512)
    context: dict[str, Any] = Field(default_factory=dict)


# -----------------------------------------------------------------------------

class RenderStringRequest(BaseModel):
    source: str
    context: dict[str, Any] = Field(default_factory=dict)


# -----------------------------------------------------------------------------

class RenderResponse(BaseModel):
    template: str
    output: str


# -----------------------------------------------------------------------------

class TemplateErrorDetail(BaseModel):
    error: str
    message: str
    filename: Optional[str] = None
    line: int = 0
    column: int = 0
