"""
Admin email template endpoints.

Endpoints:
- GET /api/admin/templates - List templates (optional category)
- POST /api/admin/templates - Create
- POST /api/admin/templates/delete - Bulk delete
- GET /api/admin/templates/{id} - Get
- PUT /api/admin/templates/{id} - Partial update
- DELETE /api/admin/templates/{id} - Delete
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from src.adapters.orm import SQLNewsletterRepo, SQLTemplateRepo
from src.api.deps import get_current_admin, get_newsletter_repo, get_template_repo
from src.api.schemas import (
    DeleteIdsRequest,
    TemplateCreateRequest,
    TemplateModel,
    TemplateUpdateRequest,
    error_response,
)
from src.components.admin import AdminUser
from src.components.templates import (
    CreateTemplateInput,
    DeleteTemplateInput,
    DeleteTemplatesInput,
    TemplateOutput,
    UpdateTemplateInput,
    get_template,
    list_templates,
    run_create_template,
    run_delete_template,
    run_delete_templates,
    run_update_template,
)

router = APIRouter()


def _template_response(result: TemplateOutput) -> dict[str, Any] | JSONResponse:
    if not result.success or result.template is None:
        return error_response(result.error, result.error_code)
    return {
        "success": True,
        "template": TemplateModel.from_entity(result.template).model_dump(mode="json"),
    }


@router.get("", summary="List templates")
def get_templates(
    category: str | None = Query(None),
    admin: AdminUser = Depends(get_current_admin),
    repo: SQLTemplateRepo = Depends(get_template_repo),
) -> dict[str, Any]:
    templates = list_templates(repo, category=category)
    return {
        "success": True,
        "templates": [TemplateModel.from_entity(t).model_dump(mode="json") for t in templates],
    }


@router.post("", summary="Create template", response_model=None)
def create_template(
    body: TemplateCreateRequest,
    admin: AdminUser = Depends(get_current_admin),
    repo: SQLTemplateRepo = Depends(get_template_repo),
) -> dict[str, Any] | JSONResponse:
    result = run_create_template(
        CreateTemplateInput(
            name=body.name,
            subject=body.subject,
            content=body.content,
            author_id=admin.id,
            preview=body.preview,
            category=body.category,
        ),
        repo,
    )
    return _template_response(result)


@router.post("/delete", summary="Delete templates", response_model=None)
def delete_templates(
    body: DeleteIdsRequest,
    admin: AdminUser = Depends(get_current_admin),
    repo: SQLTemplateRepo = Depends(get_template_repo),
    newsletters: SQLNewsletterRepo = Depends(get_newsletter_repo),
) -> dict[str, Any] | JSONResponse:
    """All-or-nothing: nothing is deleted while any template is in use."""
    result = run_delete_templates(
        DeleteTemplatesInput(template_ids=tuple(body.ids)), repo, newsletters
    )
    if not result.success:
        return error_response(result.error, result.error_code)
    return {"success": True, "deleted": result.deleted, "message": result.message}


@router.get("/{template_id}", summary="Get template")
def get_template_detail(
    template_id: UUID,
    admin: AdminUser = Depends(get_current_admin),
    repo: SQLTemplateRepo = Depends(get_template_repo),
) -> dict[str, Any]:
    template = get_template(repo, template_id)
    if not template:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Template not found",
        )
    return {
        "success": True,
        "template": TemplateModel.from_entity(template).model_dump(mode="json"),
    }


@router.put("/{template_id}", summary="Update template", response_model=None)
def update_template(
    template_id: UUID,
    body: TemplateUpdateRequest,
    admin: AdminUser = Depends(get_current_admin),
    repo: SQLTemplateRepo = Depends(get_template_repo),
) -> dict[str, Any] | JSONResponse:
    result = run_update_template(
        UpdateTemplateInput(
            template_id=template_id,
            name=body.name,
            subject=body.subject,
            content=body.content,
            preview=body.preview,
            category=body.category,
        ),
        repo,
    )
    return _template_response(result)


@router.delete("/{template_id}", summary="Delete template", response_model=None)
def delete_template(
    template_id: UUID,
    admin: AdminUser = Depends(get_current_admin),
    repo: SQLTemplateRepo = Depends(get_template_repo),
    newsletters: SQLNewsletterRepo = Depends(get_newsletter_repo),
) -> dict[str, Any] | JSONResponse:
    result = run_delete_template(DeleteTemplateInput(template_id=template_id), repo, newsletters)
    if not result.success:
        return error_response(result.error, result.error_code)
    return {"success": True, "message": result.message}
