from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON

from backend.db import Base


def _uuid_str() -> str:
    return str(uuid.uuid4())


def _default_income() -> dict:
    return {
        "wages": 0,
        "self_employment": 0,
        "interest": 0,
        "dividends": 0,
        "capital_gains": 0,
        "other": 0,
    }


def _default_deductions() -> dict:
    return {
        "standard_deduction": True,
        "itemized_deductions": {
            "mortgage_interest": 0,
            "state_local_taxes": 0,
            "charitable_contributions": 0,
            "medical_expenses": 0,
        },
    }


Money = Numeric(12, 2, asdecimal=True)


class UserORM(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=_uuid_str)
    email = Column(String, nullable=False, unique=True, index=True)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime, nullable=True)

    filing_status = Column(String, nullable=True, default="single")
    tax_classification = Column(String, nullable=True, default="individual")
    business_name = Column(String, nullable=True)
    ssn = Column(String, nullable=True)
    ein = Column(String, nullable=True)
    address = Column(JSON, nullable=True, default=dict)
    income = Column(JSON, nullable=True, default=_default_income)
    deductions = Column(JSON, nullable=True, default=_default_deductions)

    w9_uploaded = Column(Boolean, nullable=False, default=False)
    w9_upload_date = Column(DateTime, nullable=True)
    w9_file_name = Column(String, nullable=True)
    form_completion_status = Column(String, nullable=False, default="not_started")

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    dependents = relationship(
        "DependentORM",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="DependentORM.created_at",
    )
    w2_forms = relationship("W2FormORM", back_populates="user", cascade="all, delete-orphan")
    form1098s = relationship("Form1098ORM", back_populates="user", cascade="all, delete-orphan")


class DependentORM(Base):
    __tablename__ = "dependents"

    id = Column(String, primary_key=True, default=_uuid_str)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    relationship_type = Column("relationship", String, nullable=False)
    ssn = Column(String, nullable=True)
    birth_date = Column(Date, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("UserORM", back_populates="dependents")


class W2FormORM(Base):
    __tablename__ = "w2_forms"

    id = Column(String, primary_key=True, default=_uuid_str)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String, nullable=True)
    file_path = Column(String, nullable=True)

    employer = Column(String, nullable=True)
    employer_address = Column(Text, nullable=True)
    employer_ein = Column(String, nullable=True)
    employee_name = Column(String, nullable=True)
    employee_ssn = Column(String, nullable=True)
    employee_address = Column(Text, nullable=True)
    tax_year = Column(Integer, nullable=True)

    # Boxes 1-11; NULL means the box was not found in the document.
    wages = Column(Money, nullable=True)
    federal_tax_withheld = Column(Money, nullable=True)
    social_security_wages = Column(Money, nullable=True)
    social_security_tax = Column(Money, nullable=True)
    medicare_wages = Column(Money, nullable=True)
    medicare_tax = Column(Money, nullable=True)
    social_security_tips = Column(Money, nullable=True)
    allocated_tips = Column(Money, nullable=True)
    dependent_care_benefits = Column(Money, nullable=True)
    nonqualified_plans = Column(Money, nullable=True)

    # Boxes 15-17 as a list of {"state", "state_wages", "state_tax"}.
    state_tax_info = Column(JSON, nullable=True, default=list)

    is_processed = Column(Boolean, nullable=False, default=False)
    extracted_data = Column(JSON, nullable=True)
    processing_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("UserORM", back_populates="w2_forms")


class Form1098ORM(Base):
    __tablename__ = "form1098s"

    id = Column(String, primary_key=True, default=_uuid_str)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    lender_name = Column(String, nullable=False)
    lender_address = Column(Text, nullable=True)
    lender_tin = Column(String, nullable=True)
    lender_phone = Column(String, nullable=True)

    borrower_name = Column(String, nullable=False)
    borrower_ssn = Column(String, nullable=True)
    borrower_address = Column(Text, nullable=True)
    account_number = Column(String, nullable=True)

    mortgage_interest_received = Column(Money, nullable=False, default=0)
    outstanding_principal = Column(Money, nullable=True, default=0)
    origination_date = Column(Date, nullable=True)
    refund_overpaid_interest = Column(Money, nullable=True, default=0)
    mortgage_insurance_premiums = Column(Money, nullable=True, default=0)
    points_paid_purchase = Column(Money, nullable=True, default=0)
    property_address = Column(Text, nullable=True)
    other_amount = Column(Money, nullable=True, default=0)
    other_description = Column(String, nullable=True)
    number_of_properties = Column(Integer, nullable=True, default=1)
    real_estate_taxes = Column(Money, nullable=True, default=0)
    acquisition_cost = Column(Money, nullable=True, default=0)

    tax_year = Column(Integer, nullable=False)
    generated_date = Column(DateTime, nullable=True)
    pdf_path = Column(String, nullable=True)
    status = Column(String, nullable=False, default="draft")
    notes = Column(Text, nullable=True)
    metadata_json = Column("metadata", JSON, nullable=True, default=dict)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("UserORM", back_populates="form1098s")
