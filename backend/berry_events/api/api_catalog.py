from fastapi import APIRouter, status
from typing import List

from .. import schemas
from ..service_types import get_catalog
from ..utils import error_response

router = APIRouter(tags=["services"])


def _service_read(service) -> schemas.ServiceRead:
    return schemas.ServiceRead(
        id=service.id,
        name=service.name,
        category=service.category,
        base_price=service.base_price,
        property_types=service.property_types,
        add_ons=[schemas.AddOnRead.model_validate(a.model_dump()) for a in service.add_ons],
    )


@router.get("/services", response_model=List[schemas.ServiceRead])
def list_services():
    return [_service_read(s) for s in get_catalog().services]


@router.get("/services/{service_id}", response_model=schemas.ServiceRead)
def read_service(service_id: str):
    service = get_catalog().get(service_id)
    if service is None:
        raise error_response("Service not found", {"service_id": "not_found"}, status.HTTP_404_NOT_FOUND)
    return _service_read(service)
