from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

FilingStatus = Literal[
    "single",
    "married_filing_jointly",
    "married_filing_separately",
    "head_of_household",
    "qualifying_widow",
]
TaxClassification = Literal[
    "individual",
    "sole_proprietor",
    "c_corporation",
    "s_corporation",
    "partnership",
    "trust_estate",
    "llc",
    "other",
]
Relationship = Literal["child", "spouse", "parent", "other"]
FormCompletionStatus = Literal["not_started", "in_progress", "completed", "filed"]
Form1098Status = Literal["draft", "generated", "sent", "filed"]


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime


class AuthResponse(BaseModel):
    success: bool = True
    message: str
    token: Token
    user: UserRead


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class IncomeUpdate(BaseModel):
    wages: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    self_employment: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    interest: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    dividends: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    capital_gains: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    other: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)


class ItemizedDeductions(BaseModel):
    mortgage_interest: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    state_local_taxes: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    charitable_contributions: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)
    medical_expenses: Optional[Decimal] = Field(None, ge=0, max_digits=14, decimal_places=2)


class DeductionsUpdate(BaseModel):
    standard_deduction: Optional[bool] = None
    itemized_deductions: Optional[ItemizedDeductions] = None


class TaxInfoUpdate(BaseModel):
    filing_status: Optional[FilingStatus] = None
    tax_classification: Optional[TaxClassification] = None
    business_name: Optional[str] = None
    ssn: Optional[str] = None
    ein: Optional[str] = None
    address: Optional[Address] = None
    income: Optional[IncomeUpdate] = None
    deductions: Optional[DeductionsUpdate] = None


class DependentCreate(BaseModel):
    name: str = Field(..., min_length=1)
    relationship: Relationship
    ssn: Optional[str] = None
    birth_date: Optional[date] = None


class DependentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    name: str
    relationship: str = Field(validation_alias="relationship_type")
    ssn: Optional[str] = None
    birth_date: Optional[date] = None
    created_at: datetime


class TaxInfo(BaseModel):
    filing_status: Optional[str] = None
    tax_classification: Optional[str] = None
    business_name: Optional[str] = None
    ssn: Optional[str] = None
    ein: Optional[str] = None
    address: Dict[str, Any] = Field(default_factory=dict)
    income: Dict[str, Any] = Field(default_factory=dict)
    deductions: Dict[str, Any] = Field(default_factory=dict)
    w9_uploaded: bool = False
    w9_upload_date: Optional[datetime] = None
    w9_file_name: Optional[str] = None
    form_completion_status: str
    dependents: List[DependentRead] = Field(default_factory=list)


class DashboardUser(UserRead):
    tax_info: TaxInfo


class DashboardResponse(BaseModel):
    success: bool = True
    user: DashboardUser


class TaxInfoResponse(BaseModel):
    success: bool = True
    message: str
    tax_info: TaxInfo


class DependentsResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    dependent: Optional[DependentRead] = None
    dependents: List[DependentRead]


class W9UploadResponse(BaseModel):
    success: bool = True
    message: str
    file_name: str
    upload_date: datetime


class TaxCalculation(BaseModel):
    total_income: Decimal
    dependents_count: int
    dependent_deduction: Decimal
    tax_owed: Decimal
    effective_rate: Decimal


class TaxCalculationResponse(BaseModel):
    success: bool = True
    tax_year: int
    calculation: TaxCalculation


class W2FormRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    file_name: Optional[str] = None
    employer: Optional[str] = None
    employer_address: Optional[str] = None
    employer_ein: Optional[str] = None
    employee_name: Optional[str] = None
    employee_ssn: Optional[str] = None
    employee_address: Optional[str] = None
    tax_year: Optional[int] = None
    wages: Optional[Decimal] = None
    federal_tax_withheld: Optional[Decimal] = None
    social_security_wages: Optional[Decimal] = None
    social_security_tax: Optional[Decimal] = None
    medicare_wages: Optional[Decimal] = None
    medicare_tax: Optional[Decimal] = None
    social_security_tips: Optional[Decimal] = None
    allocated_tips: Optional[Decimal] = None
    dependent_care_benefits: Optional[Decimal] = None
    nonqualified_plans: Optional[Decimal] = None
    state_tax_info: List[Dict[str, Any]] = Field(default_factory=list)
    is_processed: bool
    extracted_data: Optional[Dict[str, Any]] = None
    processing_notes: Optional[str] = None
    created_at: datetime


class W2UploadResponse(BaseModel):
    success: bool = True
    message: str
    w2_form: W2FormRead
    missing_fields: List[str] = Field(default_factory=list)
    income: Optional[Dict[str, Any]] = None


class W2ListResponse(BaseModel):
    success: bool = True
    w2_forms: List[W2FormRead]


class Form1098Create(BaseModel):
    lender_name: str = Field(..., min_length=1)
    lender_address: Optional[str] = None
    lender_tin: Optional[str] = None
    lender_phone: Optional[str] = None
    borrower_name: Optional[str] = None
    borrower_ssn: Optional[str] = None
    borrower_address: Optional[str] = None
    account_number: Optional[str] = None
    mortgage_interest_received: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    outstanding_principal: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    origination_date: Optional[date] = None
    refund_overpaid_interest: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    mortgage_insurance_premiums: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    points_paid_purchase: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    property_address: Optional[str] = None
    other_amount: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    other_description: Optional[str] = None
    number_of_properties: int = Field(1, ge=1)
    real_estate_taxes: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    acquisition_cost: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
    tax_year: Optional[int] = None
    notes: Optional[str] = None


class Form1098Read(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    lender_name: str
    lender_address: Optional[str] = None
    lender_tin: Optional[str] = None
    lender_phone: Optional[str] = None
    borrower_name: str
    borrower_ssn: Optional[str] = None
    borrower_address: Optional[str] = None
    account_number: Optional[str] = None
    mortgage_interest_received: Decimal
    outstanding_principal: Optional[Decimal] = None
    origination_date: Optional[date] = None
    refund_overpaid_interest: Optional[Decimal] = None
    mortgage_insurance_premiums: Optional[Decimal] = None
    points_paid_purchase: Optional[Decimal] = None
    property_address: Optional[str] = None
    other_amount: Optional[Decimal] = None
    other_description: Optional[str] = None
    number_of_properties: Optional[int] = None
    real_estate_taxes: Optional[Decimal] = None
    acquisition_cost: Optional[Decimal] = None
    tax_year: int
    generated_date: Optional[datetime] = None
    status: Form1098Status
    notes: Optional[str] = None
    created_at: datetime


class Form1098Response(BaseModel):
    success: bool = True
    message: Optional[str] = None
    form: Form1098Read


class Form1098ListResponse(BaseModel):
    success: bool = True
    forms: List[Form1098Read]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class UserResponse(BaseModel):
    success: bool = True
    message: str
    user: UserRead
