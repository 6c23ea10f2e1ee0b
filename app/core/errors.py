import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ReservoError(Exception):
    """Erro de domínio com status HTTP associado."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Requisição inválida"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class SlotConflict(ReservoError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Já existe um agendamento neste horário."


class ValidationError(ReservoError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Preencha todos os campos obrigatórios."


class PlanLimitReached(ReservoError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Limite de agendamentos do plano atingido neste mês."


class NotFound(ReservoError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Registro não encontrado"


class SlugTaken(ReservoError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Este endereço público já está em uso."


class UnresolvedAccount(ReservoError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Não foi possível encontrar o usuário do evento"


class SignatureOrParseError(ReservoError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Falha na verificação da assinatura do webhook"


class UpstreamDeliveryFailure(ReservoError):
    """Falha ao entregar notificação ao n8n. Nunca deve interromper o agendamento."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Falha ao enviar notificação"


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(ReservoError)
    async def reservo_error_handler(request: Request, exc: ReservoError):
        logger.info(f"{type(exc).__name__} em {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Erro não tratado na rota {request.url}: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Erro interno do servidor"},
        )
