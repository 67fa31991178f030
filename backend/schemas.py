"""
schemas.py — Request shapes.
Bodies that do not match are rejected with 400 and the list of violations
before any handler logic runs.
"""
from datetime import date
from typing import Annotated, Literal, Optional
from uuid import UUID

from pydantic import (
    AfterValidator, BaseModel, EmailStr, Field, HttpUrl, StringConstraints, field_validator, model_validator,
)

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def check_calendar_date(value: str) -> str:
    """The pattern only checks shape; reject impossible dates such as 2024-02-30."""
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"{value} is not a valid calendar date")
    return value


# Query parameters holding a day, e.g. startDate=2024-01-31
CalendarDate = Annotated[str, StringConstraints(pattern=DATE_PATTERN), AfterValidator(check_calendar_date)]


class TransactionIn(BaseModel):
    type: Literal["income", "expense"]
    amount: float = Field(gt=0, allow_inf_nan=False)
    category_id: UUID
    description: Optional[str] = None
    date: str = Field(pattern=DATE_PATTERN)

    @field_validator("date")
    @classmethod
    def valid_date(cls, value):
        return check_calendar_date(value)


class ScheduledTransactionUpdate(TransactionIn):
    status: Literal["scheduled", "completed", "cancelled"]


class GoalIn(BaseModel):
    category_id: UUID
    amount: float = Field(gt=0, allow_inf_nan=False)
    month: str = Field(pattern=DATE_PATTERN)

    @field_validator("month")
    @classmethod
    def valid_month(cls, value):
        return check_calendar_date(value)


class PersonalGoalIn(BaseModel):
    name: str = Field(min_length=1)
    target_amount: float = Field(gt=0, allow_inf_nan=False)
    current_amount: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)


class PersonalGoalUpdate(BaseModel):
    name: str = Field(min_length=1)
    target_amount: float = Field(gt=0, allow_inf_nan=False)
    current_amount: float = Field(ge=0, allow_inf_nan=False)


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1)
    avatar_url: Optional[HttpUrl] = None


class CoupleRequest(BaseModel):
    partner_email: EmailStr


class PasswordReset(BaseModel):
    new_password: str = Field(min_length=8)


class Credentials(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)


class BudgetIn(BaseModel):
    category_id: UUID
    budget_amount: float = Field(gt=0, allow_inf_nan=False)
    start_date: str = Field(pattern=DATE_PATTERN)
    end_date: str = Field(pattern=DATE_PATTERN)

    @field_validator("start_date", "end_date")
    @classmethod
    def valid_dates(cls, value):
        return check_calendar_date(value)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self
