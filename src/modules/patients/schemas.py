"""Pydantic schemas for patients."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.shared.validators import PageParams


class PatientPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    gender: str | None = None
    birth_year: int | None = None
    phone: str | None = None
    address: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PatientCreate(BaseModel):
    full_name: str = Field(min_length=1, max_length=100)
    gender: str | None = Field(default=None, max_length=10)
    birth_year: int | None = Field(default=None, ge=1900, le=2100)
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=255)


class PatientUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=100)
    gender: str | None = Field(default=None, max_length=10)
    birth_year: int | None = Field(default=None, ge=1900, le=2100)
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=255)


class PatientSearchParams(PageParams):
    name: str | None = Field(None, max_length=100)
