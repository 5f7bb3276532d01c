"""Equipment router - FastAPI endpoints for equipment and maintenance"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_profile
from ...database import get_db
from ...shared.responses import ApiResponse, MessageResponse
from .schemas import (
    EquipmentCreate,
    EquipmentResponse,
    EquipmentStatus,
    EquipmentUpdate,
    MaintenanceCreate,
    MaintenanceResponse,
    MaintenanceType,
    MaintenanceUpdate,
)
from .service import EquipmentService, build_maintenance_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Equipment"], dependencies=[Depends(get_current_profile)])


def get_equipment_service(db: Session = Depends(get_db)) -> EquipmentService:
    """Dependency injection for EquipmentService"""
    return EquipmentService(db)


# ============================================================================
# EQUIPMENT
# ============================================================================


@router.get("/equipment", response_model=ApiResponse[list[EquipmentResponse]])
async def get_equipment_list(
    type: Optional[str] = Query(None, description="Filter by equipment type"),
    status: Optional[EquipmentStatus] = Query(None, description="Filter by status"),
    service: EquipmentService = Depends(get_equipment_service),
):
    items = service.get_equipment_list(type, status)
    return ApiResponse(data=[EquipmentResponse.model_validate(e) for e in items])


@router.get("/equipment/{equipment_id}", response_model=ApiResponse[EquipmentResponse])
async def get_equipment(
    equipment_id: int, service: EquipmentService = Depends(get_equipment_service)
):
    return ApiResponse(data=EquipmentResponse.model_validate(service.get_equipment(equipment_id)))


@router.post("/equipment", response_model=ApiResponse[EquipmentResponse], status_code=201)
async def create_equipment(
    data: EquipmentCreate, service: EquipmentService = Depends(get_equipment_service)
):
    return ApiResponse(data=EquipmentResponse.model_validate(service.create_equipment(data)))


@router.put("/equipment/{equipment_id}", response_model=ApiResponse[EquipmentResponse])
async def update_equipment(
    equipment_id: int,
    data: EquipmentUpdate,
    service: EquipmentService = Depends(get_equipment_service),
):
    equipment = service.update_equipment(equipment_id, data)
    return ApiResponse(data=EquipmentResponse.model_validate(equipment))


@router.delete("/equipment/{equipment_id}", response_model=MessageResponse)
async def delete_equipment(
    equipment_id: int, service: EquipmentService = Depends(get_equipment_service)
):
    service.delete_equipment(equipment_id)
    return MessageResponse(message="Equipment deleted successfully")


# ============================================================================
# MAINTENANCE RECORDS
# ============================================================================


@router.get("/maintenance", response_model=ApiResponse[list[MaintenanceResponse]])
async def get_maintenance_records(
    equipment_id: Optional[int] = Query(None, description="Filter by equipment ID"),
    type: Optional[MaintenanceType] = Query(None, description="Filter by maintenance type"),
    service: EquipmentService = Depends(get_equipment_service),
):
    """Get maintenance records, most recent first"""
    records = service.get_records(equipment_id, type)
    return ApiResponse(data=[build_maintenance_response(r) for r in records])


@router.get("/maintenance/{record_id}", response_model=ApiResponse[MaintenanceResponse])
async def get_maintenance_record(
    record_id: int, service: EquipmentService = Depends(get_equipment_service)
):
    return ApiResponse(data=build_maintenance_response(service.get_record(record_id)))


@router.post("/maintenance", response_model=ApiResponse[MaintenanceResponse], status_code=201)
async def create_maintenance_record(
    data: MaintenanceCreate, service: EquipmentService = Depends(get_equipment_service)
):
    """Log maintenance; the equipment's cost and dates are updated with it"""
    return ApiResponse(data=build_maintenance_response(service.create_record(data)))


@router.put("/maintenance/{record_id}", response_model=ApiResponse[MaintenanceResponse])
async def update_maintenance_record(
    record_id: int,
    data: MaintenanceUpdate,
    service: EquipmentService = Depends(get_equipment_service),
):
    return ApiResponse(data=build_maintenance_response(service.update_record(record_id, data)))


@router.delete("/maintenance/{record_id}", response_model=MessageResponse)
async def delete_maintenance_record(
    record_id: int, service: EquipmentService = Depends(get_equipment_service)
):
    service.delete_record(record_id)
    return MessageResponse(message="Maintenance record deleted successfully")
