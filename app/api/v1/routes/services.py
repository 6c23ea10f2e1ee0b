from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.dependencies import get_current_profile
from app.db.session import get_db
from app.models.profile import Profile
from app.repositories.service_repository import ServiceRepository
from app.schemas.profile import ServiceCreate, ServiceResponse, ServiceUpdate
from app.services.catalog_service import CatalogService

router = APIRouter(tags=["services"])


@router.get("", response_model=List[ServiceResponse])
def list_services(
    only_active: bool = Query(False),
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    return CatalogService(ServiceRepository(db)).list_services(current_profile.user_id, only_active=only_active)


@router.post("", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
def create_service(
    payload: ServiceCreate,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    return CatalogService(ServiceRepository(db)).create_service(current_profile.user_id, payload)


@router.patch("/{service_id}", response_model=ServiceResponse)
def update_service(
    service_id: int,
    payload: ServiceUpdate,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    return CatalogService(ServiceRepository(db)).update_service(current_profile.user_id, service_id, payload)
