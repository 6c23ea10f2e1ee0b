"""
Unit tests for the n8n notification dispatcher.
Run: pytest tests/unit/test_notification_service.py -v
"""
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from app.core.errors import UpstreamDeliveryFailure
from app.models.booking import Booking
from app.repositories.booking_repository import BookingRepository
from app.services.notification_service import (
    NotificationConfig,
    NotificationDispatcher,
    SENT_MARKER,
    build_payload,
    build_test_payload,
    run_notification,
)
from app.utils.money import format_brl
from tests.helpers import sp

URL = "https://n8n.example.com/webhook/reservo"


@pytest.fixture
def booking(db, profile):
    booking = Booking(
        professional_id=profile.user_id,
        client_name="Maria Souza",
        client_phone="+5511912345678",
        start_at=sp(2026, 11, 10, 9).astimezone(timezone.utc),
        end_at=sp(2026, 11, 10, 10).astimezone(timezone.utc),
        price_cents=15000,
        label="Consulta Inicial",
        status="pending",
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)
    return booking


def make_http(status_code=200, text="ok"):
    http = Mock()
    http.post.return_value = Mock(status_code=status_code, reason="OK", text=text)
    return http


def dispatcher_for(db, http, url=URL):
    return NotificationDispatcher(BookingRepository(db), NotificationConfig(webhook_url=url, timeout_seconds=5), http=http)


@pytest.mark.parametrize(
    "cents, expected",
    [(15000, "R$ 150,00"), (123456, "R$ 1.234,56"), (5, "R$ 0,05"), (None, "R$ 0,00")],
)
def test_format_brl(cents, expected):
    assert format_brl(cents) == expected


def test_payload_uses_local_date_and_fixed_field_names(booking):
    payload = build_payload(booking).model_dump()

    assert payload == {
        "clienteNome": "Maria Souza",
        "clienteTelefone": "+5511912345678",
        "profissionalNome": "Dra. Ana",
        "profissionalTelefone": "+5511988887777",
        "data": "10/11/2026",
        "hora": "09:00",
        "tipo": "Consulta Inicial",
        "preco": "R$ 150,00",
        "action": "novo_agendamento",
    }


def test_test_payload_is_synthetic():
    payload = build_test_payload(datetime(2026, 11, 10, 15, 30, tzinfo=timezone.utc))
    assert payload.action == "teste_webhook"
    assert payload.hora == "12:30"
    assert payload.preco == "R$ 150,00"


def test_dispatch_posts_json_with_timeout_and_marks_booking(db, booking):
    http = make_http()
    assert dispatcher_for(db, http).dispatch(booking.id, "novo_agendamento") is True

    http.post.assert_called_once()
    args, kwargs = http.post.call_args
    assert args == (URL,)
    assert kwargs["timeout"] == 5
    assert kwargs["json"]["clienteNome"] == "Maria Souza"

    db.refresh(booking)
    assert booking.notes == SENT_MARKER


def test_marker_is_appended_to_existing_notes(db, booking):
    booking.notes = "Primeira consulta"
    db.commit()

    dispatcher_for(db, make_http()).dispatch(booking.id)

    db.refresh(booking)
    assert booking.notes == f"Primeira consulta\n{SENT_MARKER}"


def test_unreachable_endpoint_is_swallowed(db, booking):
    http = Mock()
    http.post.side_effect = requests.ConnectionError("connection refused")

    assert dispatcher_for(db, http).dispatch(booking.id) is False
    db.refresh(booking)
    assert booking.notes is None


def test_timeout_is_swallowed(db, booking):
    http = Mock()
    http.post.side_effect = requests.Timeout("read timeout")
    assert dispatcher_for(db, http).dispatch(booking.id) is False


def test_upstream_error_status_is_swallowed(db, booking):
    assert dispatcher_for(db, make_http(status_code=500, text="boom")).dispatch(booking.id) is False


def test_unexpected_error_is_swallowed(db, booking):
    http = Mock()
    http.post.side_effect = RuntimeError("bug")
    assert dispatcher_for(db, http).dispatch(booking.id) is False


def test_missing_booking_is_swallowed(db, profile):
    http = make_http()
    assert dispatcher_for(db, http).dispatch(999) is False
    http.post.assert_not_called()


def test_unconfigured_url_skips_dispatch(db, booking):
    http = make_http()
    assert dispatcher_for(db, http, url=None).dispatch(booking.id) is False
    http.post.assert_not_called()


def test_deliver_raises_upstream_failure(db, booking):
    with pytest.raises(UpstreamDeliveryFailure):
        dispatcher_for(db, make_http(status_code=404)).deliver(booking.id)


def test_send_test_returns_upstream_response(db):
    http = make_http(status_code=202, text="accepted")
    result = dispatcher_for(db, http).send_test()

    assert result["status"] == 202
    assert result["body"] == "accepted"
    assert result["payload"].action == "teste_webhook"


def test_send_test_without_url_fails(db):
    with pytest.raises(UpstreamDeliveryFailure):
        dispatcher_for(db, make_http(), url=None).send_test()


def test_run_notification_uses_its_own_session(session_factory, booking, monkeypatch):
    post = Mock(return_value=Mock(status_code=200, reason="OK", text="ok"))
    monkeypatch.setattr("app.services.notification_service.requests.post", post)

    assert run_notification(booking.id, "novo_agendamento", session_factory, NotificationConfig(webhook_url=URL)) is True
    post.assert_called_once()
