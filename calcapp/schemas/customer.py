"""고객 Pydantic 스키마 — Customer schemas."""

from datetime import date, datetime
from pydantic import BaseModel, EmailStr, Field, model_validator


class CustomerBase(BaseModel):
    title: str | None = Field(default=None, max_length=50)
    first_name: str | None = Field(default=None, max_length=50)
    last_name: str | None = Field(default=None, max_length=50)
    company: str | None = Field(default=None, max_length=255)
    address: str | None = Field(default=None, max_length=255)
    zip_code: str | None = Field(default=None, max_length=10)
    city: str | None = Field(default=None, max_length=255)
    country: str | None = Field(default="CH", max_length=2)
    email: EmailStr | None = None
    web_site: str | None = Field(default=None, max_length=100)
    birthday: date | None = None


class CustomerCreate(CustomerBase):
    """고객 생성 — 회사명 또는 성/이름 필수 (Company or first/last name required)."""

    @model_validator(mode="after")
    def _check_name(self) -> "CustomerCreate":
        if not (self.company or self.first_name or self.last_name):
            raise ValueError("The company or the first/last name must be given")
        return self


class CustomerUpdate(CustomerBase):
    country: str | None = Field(default=None, max_length=2)


class CustomerResponse(CustomerBase):
    id: str
    display_name: str
    created_at: datetime | None = None
