from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class NotificationPayload(BaseModel):
    """Corpo enviado ao n8n (nomes de campo fixos, consumidos pelo fluxo do WhatsApp)."""
    clienteNome: str
    clienteTelefone: Optional[str] = None
    profissionalNome: str = ""
    profissionalTelefone: str = ""
    data: str
    hora: str
    tipo: str
    preco: str
    action: str


class NotificationResendRequest(BaseModel):
    action: str = Field("novo_agendamento", min_length=1, max_length=64)


class NotificationResult(BaseModel):
    success: bool
    message: str
    payload: Optional[NotificationPayload] = None


class TestWebhookResponse(BaseModel):
    success: bool
    message: str
    n8nResponse: Dict[str, Any]
    payload: NotificationPayload
