import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from app.core.config import settings

logger = logging.getLogger(__name__)


def decode_access_token(token: str) -> Optional[dict]:
    """Valida o JWT emitido pelo Supabase Auth e retorna os claims (ou None se inválido)."""
    audience = settings.JWT_AUDIENCE
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=audience,
            options={"verify_exp": True, "verify_aud": bool(audience)},
        )
    except JWTError as e:
        logger.warning(f"Erro JWT ao decodificar token: {e}")
        return None


def create_access_token(claims: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Emite um token no mesmo formato do Supabase (usado por scripts e testes)."""
    to_encode = claims.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=1))
    to_encode.update({"exp": expire})
    if settings.JWT_AUDIENCE and "aud" not in to_encode:
        to_encode["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(to_encode, settings.SUPABASE_JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
