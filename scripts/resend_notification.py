"""
Script para reenviar a notificação (n8n/WhatsApp) de um agendamento.
Usage: python scripts/resend_notification.py <booking_id> [action]
"""
import os
import sys

import requests

# Configuration
API_BASE_URL = os.getenv("RESERVO_API_URL", "http://localhost:8000")
# Token JWT do Supabase do profissional dono do agendamento
AUTH_TOKEN = os.getenv("RESERVO_AUTH_TOKEN", "")


def resend(booking_id: int, action: str) -> bool:
    url = f"{API_BASE_URL}/api/v1/notifications/bookings/{booking_id}"
    headers = {
        "Authorization": f"Bearer {AUTH_TOKEN}",
        "Content-Type": "application/json",
    }

    print(f"Reenviando notificação do agendamento {booking_id} ({action})...")
    response = requests.post(url, headers=headers, json={"action": action}, timeout=30)

    if response.status_code == 200:
        data = response.json()
        print("✓ Notificação enviada!")
        for key, value in (data.get("payload") or {}).items():
            print(f"  {key}: {value}")
        return True
    else:
        print(f"✗ Falha ao reenviar. Status: {response.status_code}")
        print(f"  Response: {response.text}")
        return False


if __name__ == "__main__":
    if len(sys.argv) < 2 or not sys.argv[1].isdigit():
        print("Usage: python scripts/resend_notification.py <booking_id> [action]")
        print("Example: python scripts/resend_notification.py 42 lembrete")
        sys.exit(1)

    if not AUTH_TOKEN:
        print("Error: defina RESERVO_AUTH_TOKEN com o token JWT do profissional.")
        sys.exit(1)

    action = sys.argv[2] if len(sys.argv) > 2 else "novo_agendamento"
    success = resend(int(sys.argv[1]), action)
    sys.exit(0 if success else 1)
