# carwash/routers/services_routes.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from carwash.auth import get_current_user
from carwash.db import get_session
from carwash.deps import require_role
from carwash.models import Service
from carwash.schemas import ServiceCreate, ServicePublic, ServiceUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/services",
    tags=["services"],
)


@router.get("", response_model=List[ServicePublic])
def list_services(
    category: Optional[str] = None,
    session: Session = Depends(get_session),
):
    stmt = select(Service).where(Service.is_active == True)  # noqa: E712
    if category is not None:
        stmt = stmt.where(Service.category == category)
    stmt = stmt.order_by(Service.category, Service.price_cents)
    return session.exec(stmt).all()


@router.get("/all", response_model=List[ServicePublic])
def list_all_services(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin", "staff")
    return session.exec(select(Service).order_by(Service.id)).all()


@router.get("/{service_id}", response_model=ServicePublic)
def get_service(
    service_id: int,
    session: Session = Depends(get_session),
):
    service = session.get(Service, service_id)
    if service is None or not service.is_active:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.post("", response_model=ServicePublic, status_code=201)
def create_service(
    data: ServiceCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    service = Service(**data.model_dump())
    session.add(service)
    session.commit()
    session.refresh(service)

    logger.info(f"Service {service.id} created by {current_user['email']}: {service.name}")
    return service


@router.patch("/{service_id}", response_model=ServicePublic)
def update_service(
    service_id: int,
    data: ServiceUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    service = session.get(Service, service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")

    # null means "leave unchanged"; every service column is NOT NULL
    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(service, key, value)

    session.add(service)
    session.commit()
    session.refresh(service)
    return service


@router.delete("/{service_id}", response_model=ServicePublic)
def deactivate_service(
    service_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    service = session.get(Service, service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")

    # Soft delete: existing bookings keep pointing at the service
    service.is_active = False
    session.add(service)
    session.commit()
    session.refresh(service)

    logger.info(f"Service {service.id} deactivated by {current_user['email']}")
    return service
