from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Profile(Base):
    """Account owner: identity, business snapshot and subscription state"""

    __tablename__ = "profiles"

    # Identity provider uid (Firebase "sub"); also the checkout metadata userId
    id = Column(String(128), primary_key=True, index=True)
    email = Column(String(255), index=True, nullable=True)
    full_name = Column(String(255), nullable=True)

    # Business snapshot printed on invoices
    company = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    phone = Column(String(50), nullable=True)
    website = Column(String(255), nullable=True)
    tax_id = Column(String(100), nullable=True)

    # Payments provider subscription state, written by webhooks
    dodo_customer_id = Column(String(255), nullable=True, index=True)
    dodo_subscription_id = Column(String(255), nullable=True, index=True)
    subscription_status = Column(String(50), nullable=True)  # active, past_due, canceled
    plan = Column(String(50), nullable=True)  # starter, pro - null until purchased

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    type = Column(String(50), default="Residential")  # Residential, Commercial, Municipal
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    jobs = relationship("Job", back_populates="client", cascade="all, delete-orphan")
    invoices = relationship("Invoice", back_populates="client", cascade="all, delete-orphan")


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(
        Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service = Column(String(255), nullable=False)
    date = Column(Date, nullable=False)
    time_slot = Column(String(50), nullable=True)
    status = Column(String(50), default="Scheduled")  # Scheduled, InProgress, Completed, Cancelled
    total_amount = Column(Float, default=0)

    # Recurrence
    recurring_type = Column(String(20), default="none")  # none, weekly, biweekly, monthly
    recurring_day = Column(Integer, nullable=True)  # Day of month for monthly jobs

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="jobs")
    invoices = relationship("Invoice", back_populates="job", passive_deletes=True)
    expenses = relationship("Expense", back_populates="job", passive_deletes=True)


class EmailLog(Base):
    """History of every email send attempt"""

    __tablename__ = "email_logs"

    id = Column(Integer, primary_key=True, index=True)
    to = Column(String(255), nullable=False)
    subject = Column(String(500), nullable=False)
    body = Column(Text, nullable=True)
    is_html = Column(Boolean, default=False)
    email_type = Column(String(50), default="custom")  # custom, invoice, job_confirmation, payment
    status = Column(String(20), default="sent")  # success, sent, failed
    error = Column(Text, nullable=True)
    sent_at = Column(DateTime, server_default=func.now())
