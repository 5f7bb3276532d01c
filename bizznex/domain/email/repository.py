"""Email repository - Database operations for the send history"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import EmailLog


class EmailLogRepository:
    """Repository for email history operations"""

    @staticmethod
    def create_log(db: Session, **log_data) -> EmailLog:
        log = EmailLog(**log_data)
        db.add(log)
        db.commit()
        db.refresh(log)
        return log

    @staticmethod
    def get_logs(db: Session, limit: Optional[int] = None) -> list[EmailLog]:
        """Get send history, newest first"""
        query = db.query(EmailLog).order_by(EmailLog.sent_at.desc(), EmailLog.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get_log_by_id(db: Session, log_id: int) -> Optional[EmailLog]:
        return db.query(EmailLog).filter(EmailLog.id == log_id).first()

    @staticmethod
    def delete_log(db: Session, log: EmailLog) -> None:
        db.delete(log)
        db.commit()
