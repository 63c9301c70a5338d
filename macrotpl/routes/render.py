#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Render router
=============
POST /api/v1/render          — render a template file from the template set
POST /api/v1/render/string   — compile and render an ad-hoc template string

Template errors are reported as 422 with the error's position; a missing
template file is a 404.
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from macrotpl.core.errors import TemplateError, TemplateNotFoundError
from macrotpl.schemas import (
    RenderFileRequest,
    RenderResponse,
    RenderStringRequest,
    TemplateErrorDetail,
)
from macrotpl.services.template_set import TemplateSet, get_template_set

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------

router = APIRouter(prefix="/render", tags=["Render"])


# -----------------------------------------------------------------------------

def _error_response(exc: TemplateError) -> HTTPException:
    detail = TemplateErrorDetail(
        error=type(exc).__name__,
        message=exc.message,
        filename=exc.filename,
        line=exc.line,
        column=exc.column,
    )
    code = (
        status.HTTP_404_NOT_FOUND
        if isinstance(exc, TemplateNotFoundError)
        else status.HTTP_422_UNPROCESSABLE_ENTITY
    )
    return HTTPException(status_code=code, detail=detail.model_dump())


# -----------------------------------------------------------------------------

@router.post("", response_model=RenderResponse)
async def render_file(
    data: RenderFileRequest,
    tset: TemplateSet = Depends(get_template_set),
):
    try:
        template = tset.from_file(data.template)
        output = template.render(data.context)
    except TemplateError as exc:
        logger.info("Render of %s failed: %s", data.template, exc)
        raise _error_response(exc) from exc

    return RenderResponse(template=template.name, output=output)


# -----------------------------------------------------------------------------

@router.post("/string", response_model=RenderResponse)
async def render_string(
    data: RenderStringRequest,
    tset: TemplateSet = Depends(get_template_set),
):
    try:
        template = tset.from_string(data.source)
        output = template.render(data.context)
    except TemplateError as exc:
        logger.info("Render of template string failed: %s", exc)
        raise _error_response(exc) from exc

    return RenderResponse(template=template.name, output=output)


# -----------------------------------------------------------------------------
