from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator


class BookingBase(BaseModel):
    client_name: str = Field(..., min_length=1, max_length=255)
    client_email: Optional[EmailStr] = None
    client_phone: Optional[str] = Field(None, max_length=32)
    start_at: datetime
    # Se ausente, a duração vem do serviço escolhido
    end_at: Optional[datetime] = None
    service_id: Optional[int] = None
    label: Optional[str] = Field(None, max_length=255)
    price_cents: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_window_source(self) -> "BookingBase":
        if self.end_at is None and self.service_id is None:
            raise ValueError("Informe end_at ou service_id")
        return self


class BookingCreate(BookingBase):
    """Agendamento criado pelo profissional no painel (confirmado direto)."""


class PublicBookingCreate(BaseModel):
    """
    Agendamento feito pelo cliente na página pública (pendente até o pagamento).
    Preço, rótulo e duração vêm sempre do serviço escolhido.
    """
    client_name: str = Field(..., min_length=1, max_length=255)
    client_email: Optional[EmailStr] = None
    client_phone: Optional[str] = Field(None, max_length=32)
    service_id: int
    start_at: datetime
    # Opcional; se vier, precisa bater com a duração do serviço
    end_at: Optional[datetime] = None
    notes: Optional[str] = None
    payment_method: Literal["pix", "card"]


class PaymentResponse(BaseModel):
    id: int
    method: str
    amount_cents: int
    status: str

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    id: int
    professional_id: str
    service_id: Optional[int] = None
    client_name: str
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    start_at: datetime
    end_at: datetime
    price_cents: int
    notes: Optional[str] = None
    status: str
    label: str
    created_by: str
    payment: Optional[PaymentResponse] = None

    class Config:
        from_attributes = True


class PublicBookingResponse(BaseModel):
    """Resposta ao cliente: inclui a chave PIX do profissional para pagamento."""
    booking: BookingResponse
    pix_key: Optional[str] = None
