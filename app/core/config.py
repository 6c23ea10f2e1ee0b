from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database (Supabase PostgreSQL)
    DATABASE_URL: str

    # Supabase Auth: o backend apenas valida o JWT emitido pelo Supabase
    SUPABASE_URL: Optional[str] = None
    SUPABASE_JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = "authenticated"

    # App Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Reservo Backend"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Fuso usado para interpretar horários sem offset, limites mensais e mensagens pt-BR
    TIMEZONE: str = "America/Sao_Paulo"

    # Redis (broker do Celery para notificações)
    REDIS_URL: Optional[str] = None
    REDIS_PASSWORD: Optional[str] = None

    @model_validator(mode='after')
    def assemble_redis_url(self) -> 'Settings':
        if self.REDIS_PASSWORD and self.REDIS_URL:
            # Se a URL já contiver senha (ex: :password@...), não fazemos nada
            if "@" in self.REDIS_URL:
                return self

            import urllib.parse
            if "redis://" in self.REDIS_URL:
                encoded_pwd = urllib.parse.quote_plus(self.REDIS_PASSWORD)
                # Formato: redis://:PASSWORD@HOST:PORT/DB
                self.REDIS_URL = self.REDIS_URL.replace("redis://", f"redis://:{encoded_pwd}@", 1)
        return self

    # Stripe
    STRIPE_API_KEY: Optional[str] = None
    STRIPE_WEBHOOK_SECRET: Optional[str] = None
    STRIPE_WEBHOOK_TOLERANCE_SECONDS: int = 300

    # Planos: checkout com este valor (centavos) vira premium; qualquer outro valor vira professional
    PREMIUM_PRICE_CENTS: int = 3790
    SUBSCRIPTION_PERIOD_DAYS: int = 30

    # Notificações (n8n -> WhatsApp)
    N8N_WEBHOOK_URL: Optional[str] = None
    NOTIFICATION_TIMEOUT_SECONDS: float = 10.0
    # "background" (BackgroundTasks do FastAPI) ou "celery" (requer REDIS_URL e worker)
    NOTIFICATION_BACKEND: str = "background"

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
        "https://reservo.com.br",
        "https://app.reservo.com.br",
    ]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
