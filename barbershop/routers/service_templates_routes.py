# barbershop/routers/service_templates_routes.py

from fastapi import APIRouter, HTTPException

from barbershop.data import SERVICE_TEMPLATES

router = APIRouter(
    prefix="/api/service-templates",
    tags=["service-templates"],
)


@router.get("")
def list_service_templates():
    return SERVICE_TEMPLATES


@router.get("/{category}")
def service_templates_by_category(category: str):
    templates = SERVICE_TEMPLATES.get(category)
    if templates is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return templates
