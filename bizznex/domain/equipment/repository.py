"""Equipment repository - Database operations for equipment and maintenance"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models_equipment import Equipment, MaintenanceRecord


class EquipmentRepository:
    """Repository for equipment database operations"""

    @staticmethod
    def get_equipment_list(
        db: Session, type: Optional[str] = None, status: Optional[str] = None
    ) -> list[Equipment]:
        """Get equipment sorted by name"""
        query = db.query(Equipment)
        if type:
            query = query.filter(Equipment.type == type)
        if status:
            query = query.filter(Equipment.status == status)
        return query.order_by(Equipment.name.asc()).all()

    @staticmethod
    def get_equipment_by_id(db: Session, equipment_id: int) -> Optional[Equipment]:
        return db.query(Equipment).filter(Equipment.id == equipment_id).first()

    @staticmethod
    def save(db: Session, instance):
        db.add(instance)
        db.commit()
        db.refresh(instance)
        return instance

    @staticmethod
    def update(db: Session, instance, **updates):
        for key, value in updates.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        db.commit()
        db.refresh(instance)
        return instance

    @staticmethod
    def delete(db: Session, instance) -> None:
        db.delete(instance)
        db.commit()

    @staticmethod
    def get_records(
        db: Session, equipment_id: Optional[int] = None, type: Optional[str] = None
    ) -> list[MaintenanceRecord]:
        """Get maintenance records, most recent first"""
        query = db.query(MaintenanceRecord).options(joinedload(MaintenanceRecord.equipment))
        if equipment_id is not None:
            query = query.filter(MaintenanceRecord.equipment_id == equipment_id)
        if type:
            query = query.filter(MaintenanceRecord.type == type)
        return query.order_by(MaintenanceRecord.date.desc(), MaintenanceRecord.id.desc()).all()

    @staticmethod
    def get_record_by_id(db: Session, record_id: int) -> Optional[MaintenanceRecord]:
        return (
            db.query(MaintenanceRecord)
            .options(joinedload(MaintenanceRecord.equipment))
            .filter(MaintenanceRecord.id == record_id)
            .first()
        )

    @staticmethod
    def add_record(db: Session, equipment: Equipment, record: MaintenanceRecord, **updates):
        """Insert a maintenance record and roll it up into the equipment in one commit"""
        for key, value in updates.items():
            setattr(equipment, key, value)
        db.add(record)
        db.commit()
        db.refresh(record)
        return record
