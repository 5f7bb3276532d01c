"""Equipment service - Business logic for equipment and maintenance records"""

import logging
from typing import Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...errors import NotFoundError, PersistenceError, ValidationError
from ...models_equipment import Equipment, MaintenanceRecord
from ..invoices.calculations import round_money
from .repository import EquipmentRepository
from .schemas import (
    EquipmentCreate,
    EquipmentUpdate,
    MaintenanceCreate,
    MaintenanceResponse,
    MaintenanceUpdate,
)

logger = logging.getLogger(__name__)

# Scheduled maintenance books the next service this far out
MAINTENANCE_INTERVAL = relativedelta(months=3)


def build_maintenance_response(record: MaintenanceRecord) -> MaintenanceResponse:
    response = MaintenanceResponse.model_validate(record)
    if record.equipment is not None:
        response = response.model_copy(update={"equipment_name": record.equipment.name})
    return response


class EquipmentService:
    """Service layer for equipment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EquipmentRepository()

    @staticmethod
    def _reject_nulls(updates: dict, *required: str) -> None:
        for field in required:
            if field in updates and updates[field] is None:
                raise ValidationError(f"{field} cannot be empty")

    def _commit(self, action: str, fn, *args, **kwargs):
        try:
            return fn(self.db, *args, **kwargs)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to {action}: {e}")
            raise PersistenceError(f"Failed to {action}") from e

    # ========================================================================
    # EQUIPMENT
    # ========================================================================

    def get_equipment_list(
        self, type: Optional[str] = None, status: Optional[str] = None
    ) -> list[Equipment]:
        return self.repo.get_equipment_list(self.db, type, status)

    def get_equipment(self, equipment_id: int) -> Equipment:
        equipment = self.repo.get_equipment_by_id(self.db, equipment_id)
        if not equipment:
            raise NotFoundError("Equipment not found")
        return equipment

    def create_equipment(self, data: EquipmentCreate) -> Equipment:
        logger.info(f"🚜 Adding equipment: {data.name} ({data.type or 'untyped'})")
        equipment = Equipment(**data.model_dump(), maintenance_cost=0)
        return self._commit("create equipment", self.repo.save, equipment)

    def update_equipment(self, equipment_id: int, data: EquipmentUpdate) -> Equipment:
        equipment = self.get_equipment(equipment_id)
        updates = data.model_dump(exclude_unset=True)
        self._reject_nulls(updates, "name", "status")
        return self._commit("update equipment", self.repo.update, equipment, **updates)

    def delete_equipment(self, equipment_id: int) -> None:
        equipment = self.get_equipment(equipment_id)
        self._commit("delete equipment", self.repo.delete, equipment)
        logger.info(f"🗑️ Deleted equipment {equipment_id} and its maintenance history")

    # ========================================================================
    # MAINTENANCE
    # ========================================================================

    def get_records(
        self, equipment_id: Optional[int] = None, type: Optional[str] = None
    ) -> list[MaintenanceRecord]:
        return self.repo.get_records(self.db, equipment_id, type)

    def get_record(self, record_id: int) -> MaintenanceRecord:
        record = self.repo.get_record_by_id(self.db, record_id)
        if not record:
            raise NotFoundError("Maintenance record not found")
        return record

    def create_record(self, data: MaintenanceCreate) -> MaintenanceRecord:
        """
        Log maintenance and roll it into the equipment: cost is added to the
        running total, the last maintenance date moves to this record, and
        scheduled maintenance books the next one three months out.
        """
        equipment = self.get_equipment(data.equipment_id)
        cost = round_money(data.cost)
        record = MaintenanceRecord(**data.model_dump(exclude={"cost"}), cost=cost)

        updates = {
            "maintenance_cost": round_money((equipment.maintenance_cost or 0) + cost),
            "last_maintenance_date": data.date,
        }
        if data.type == "scheduled":
            updates["next_maintenance_date"] = data.date + MAINTENANCE_INTERVAL

        record = self._commit(
            "create maintenance record", self.repo.add_record, equipment, record, **updates
        )
        logger.info(
            f"🔧 Logged {data.type} maintenance for equipment {equipment.id}: "
            f"cost {cost:.2f}, total {equipment.maintenance_cost:.2f}"
        )
        return record

    def update_record(self, record_id: int, data: MaintenanceUpdate) -> MaintenanceRecord:
        """Update a record, keeping the equipment's running cost in step"""
        record = self.get_record(record_id)
        updates = data.model_dump(exclude_unset=True)
        self._reject_nulls(updates, "type", "date", "cost")
        if updates.get("cost") is not None and record.equipment is not None:
            new_cost = round_money(updates["cost"])
            updates["cost"] = new_cost
            equipment = record.equipment
            equipment.maintenance_cost = round_money(
                max((equipment.maintenance_cost or 0) - (record.cost or 0) + new_cost, 0)
            )
        return self._commit("update maintenance record", self.repo.update, record, **updates)

    def delete_record(self, record_id: int) -> None:
        record = self.get_record(record_id)
        if record.equipment is not None:
            equipment = record.equipment
            equipment.maintenance_cost = round_money(
                max((equipment.maintenance_cost or 0) - (record.cost or 0), 0)
            )
        self._commit("delete maintenance record", self.repo.delete, record)
        logger.info(f"🗑️ Deleted maintenance record {record_id}")
