import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class ProfileUpdate(BaseModel):
    """Campos editáveis na tela de configurações."""
    name: Optional[str] = Field(None, max_length=255)
    profession: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=32)
    pix_key: Optional[str] = Field(None, max_length=255)
    slug: Optional[str] = Field(None, min_length=3, max_length=120)

    @field_validator("slug")
    @classmethod
    def normalize_slug(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip().lower()
        if not SLUG_PATTERN.match(value):
            raise ValueError("Use apenas letras minúsculas, números e hífens")
        return value


class ProfileResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    profession: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    pix_key: Optional[str] = None
    slug: Optional[str] = None
    plan: str
    plan_limit: Optional[int] = None  # None = ilimitado
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    duration_minutes: int = Field(..., gt=0, le=24 * 60)
    price_cents: int = Field(0, ge=0)
    is_active: bool = True


class ServiceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    duration_minutes: Optional[int] = Field(None, gt=0, le=24 * 60)
    price_cents: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ServiceResponse(BaseModel):
    id: int
    name: str
    duration_minutes: int
    price_cents: int
    is_active: bool

    class Config:
        from_attributes = True


class PublicProfileResponse(BaseModel):
    """Página pública do profissional (sem dados de plano ou chave PIX)."""
    name: Optional[str] = None
    profession: Optional[str] = None
    bio: Optional[str] = None
    slug: str
    services: List[ServiceResponse] = []

    class Config:
        from_attributes = True
