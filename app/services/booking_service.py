import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple, Union

from sqlalchemy.exc import IntegrityError

from app.core.errors import NotFound, PlanLimitReached, SlotConflict, ValidationError
from app.models.booking import (
    Booking,
    CREATED_BY_CLIENT,
    CREATED_BY_PROFESSIONAL,
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
    STATUS_PENDING,
)
from app.models.payment import METHOD_CARD, METHOD_PIX, PAYMENT_PENDING, Payment
from app.models.profile import Profile
from app.repositories.booking_repository import BookingRepository
from app.repositories.payment_repository import PaymentRepository
from app.repositories.profile_repository import ProfileRepository
from app.repositories.service_repository import ServiceRepository
from app.schemas.booking import BookingBase, PublicBookingCreate
from app.utils.dates import month_bounds, to_utc

logger = logging.getLogger(__name__)

DEFAULT_LABEL = "Consulta"
OVERLAP_CONSTRAINT = "bookings_no_overlap_per_professional"

BookingData = Union[BookingBase, PublicBookingCreate]


def windows_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Teste de sobreposição de intervalos semiabertos [start, end)."""
    return start_a < end_b and start_b < end_a


class BookingService:
    def __init__(
        self,
        profile_repo: ProfileRepository,
        booking_repo: BookingRepository,
        payment_repo: PaymentRepository,
        service_repo: ServiceRepository,
    ):
        self.profile_repo = profile_repo
        self.booking_repo = booking_repo
        self.payment_repo = payment_repo
        self.service_repo = service_repo
        self.db = booking_repo.db

    # ------------------------------------------------------------------
    # Verificação de disponibilidade
    # ------------------------------------------------------------------

    def is_slot_free(self, professional_id: str, start_at: datetime, end_at: datetime) -> bool:
        """True se nenhum agendamento não cancelado cruza [start_at, end_at)."""
        start_utc, end_utc = to_utc(start_at), to_utc(end_at)
        conflicts = self.booking_repo.find_overlapping(professional_id, start_utc, end_utc)
        if conflicts:
            logger.info(
                f"Conflito de horário para {professional_id}: {start_utc.isoformat()} - {end_utc.isoformat()} "
                f"(agendamentos {[b.id for b in conflicts]})"
            )
        return not conflicts

    def ensure_slot_free(self, professional_id: str, start_at: datetime, end_at: datetime) -> None:
        if not self.is_slot_free(professional_id, start_at, end_at):
            raise SlotConflict()

    def ensure_within_plan_limit(self, profile: Profile, start_at: datetime) -> None:
        """Limite mensal do plano: conta agendamentos não cancelados no mês civil do novo horário."""
        if profile.plan_limit is None:
            return
        month_start, month_end = month_bounds(start_at)
        used = self.booking_repo.count_active_starting_between(profile.user_id, month_start, month_end)
        if used >= profile.plan_limit:
            logger.info(f"Limite do plano {profile.plan} atingido para {profile.user_id}: {used}/{profile.plan_limit}")
            raise PlanLimitReached()

    # ------------------------------------------------------------------
    # Criação
    # ------------------------------------------------------------------

    def _resolve_details(
        self, professional_id: str, data: BookingData, created_by: str
    ) -> Tuple[datetime, datetime, int, str]:
        """
        Janela (UTC), preço e rótulo do agendamento.

        Pelo painel o profissional pode sobrescrever término, preço e rótulo.
        Pela página pública tudo vem do serviço; um end_at diferente da duração
        do serviço é rejeitado.
        """
        service = None
        if data.service_id is not None:
            service = self.service_repo.get_by_id(data.service_id, user_id=professional_id)
            if not service or not service.is_active:
                raise ValidationError("Serviço não encontrado ou inativo.")

        start_at = to_utc(data.start_at)

        if created_by == CREATED_BY_CLIENT:
            if service is None:
                raise ValidationError("Escolha um serviço.")
            end_at = start_at + timedelta(minutes=service.duration_minutes)
            if data.end_at is not None and to_utc(data.end_at) != end_at:
                raise ValidationError("O horário de término não corresponde à duração do serviço.")
            return start_at, end_at, service.price_cents, service.name

        if data.end_at is not None:
            end_at = to_utc(data.end_at)
        elif service is not None:
            end_at = start_at + timedelta(minutes=service.duration_minutes)
        else:
            raise ValidationError("Informe o horário de término ou o serviço.")

        if start_at >= end_at:
            raise ValidationError("O horário de término deve ser posterior ao de início.")

        if data.price_cents is not None:
            price_cents = data.price_cents
        elif service is not None:
            price_cents = service.price_cents
        else:
            price_cents = 0

        label = (data.label or "").strip() or (service.name if service else DEFAULT_LABEL)
        return start_at, end_at, price_cents, label

    def create_booking(
        self,
        professional_id: str,
        data: BookingData,
        created_by: str,
        payment_method: Optional[str] = None,
    ) -> Booking:
        """
        Verifica o horário e grava o agendamento (e o pagamento, se vier do cliente)
        numa única transação.

        A linha do profissional fica travada (SELECT ... FOR UPDATE) durante a verificação
        e o insert; no PostgreSQL a exclusion constraint é a garantia final contra
        dois agendamentos simultâneos no mesmo horário.
        """
        client_name = (data.client_name or "").strip()
        if not client_name:
            raise ValidationError("Nome do cliente é obrigatório.")
        if created_by == CREATED_BY_CLIENT and payment_method not in (METHOD_PIX, METHOD_CARD):
            raise ValidationError("Forma de pagamento inválida.")

        try:
            profile = self.profile_repo.get_by_user_id_for_update(professional_id)
            if not profile:
                raise NotFound("Profissional não encontrado")

            start_at, end_at, price_cents, label = self._resolve_details(professional_id, data, created_by)
            self.ensure_within_plan_limit(profile, start_at)
            self.ensure_slot_free(professional_id, start_at, end_at)

            booking = Booking(
                professional_id=professional_id,
                service_id=data.service_id,
                client_name=client_name,
                client_email=data.client_email,
                client_phone=data.client_phone,
                start_at=start_at,
                end_at=end_at,
                price_cents=price_cents,
                notes=data.notes,
                label=label,
                created_by=created_by,
                status=STATUS_CONFIRMED if created_by == CREATED_BY_PROFESSIONAL else STATUS_PENDING,
            )
            self.booking_repo.add(booking)

            if created_by == CREATED_BY_CLIENT:
                self.payment_repo.add(
                    Payment(
                        booking_id=booking.id,
                        method=payment_method,
                        amount_cents=price_cents,
                        status=PAYMENT_PENDING,
                    )
                )

            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if OVERLAP_CONSTRAINT in str(e.orig):
                logger.warning(f"Exclusion constraint rejeitou agendamento concorrente para {professional_id}")
                raise SlotConflict()
            raise
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(
            f"Agendamento {booking.id} criado ({created_by}) para {professional_id}: "
            f"{booking.start_at} - {booking.end_at}, status={booking.status}"
        )
        return booking

    # ------------------------------------------------------------------
    # Consulta e mudanças de status
    # ------------------------------------------------------------------

    def get_booking(self, professional_id: str, booking_id: int) -> Booking:
        booking = self.booking_repo.get_by_id(booking_id, professional_id=professional_id)
        if not booking:
            raise NotFound("Agendamento não encontrado")
        return booking

    def list_bookings(
        self,
        professional_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> List[Booking]:
        start_utc = to_utc(start) if start else None
        end_utc = to_utc(end) if end else None
        if start_utc and end_utc and start_utc >= end_utc:
            raise ValidationError("Intervalo de datas inválido.")
        return self.booking_repo.list_by_professional(professional_id, start_utc, end_utc, status)

    def cancel_booking(self, professional_id: str, booking_id: int) -> Booking:
        booking = self.get_booking(professional_id, booking_id)
        if booking.status == STATUS_CANCELLED:
            return booking
        booking.status = STATUS_CANCELLED
        booking = self.booking_repo.update(booking)
        logger.info(f"Agendamento {booking_id} cancelado por {professional_id}")
        return booking

    def confirm_booking(self, professional_id: str, booking_id: int) -> Booking:
        booking = self.get_booking(professional_id, booking_id)
        if booking.status == STATUS_CANCELLED:
            raise ValidationError("Agendamento cancelado não pode ser confirmado.")
        if booking.status == STATUS_CONFIRMED:
            return booking
        booking.status = STATUS_CONFIRMED
        booking = self.booking_repo.update(booking)
        logger.info(f"Agendamento {booking_id} confirmado por {professional_id}")
        return booking
