import logging
import sys

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configura o logging raiz uma única vez (stdout, formato único para app e uvicorn)."""
    level_name = (level or settings.LOG_LEVEL or "INFO").upper()
    root = logging.getLogger()
    root.setLevel(level_name)

    if not any(getattr(h, "_reservo", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._reservo = True
        root.addHandler(handler)

    # uvicorn instala seus próprios handlers; propagamos para o root para manter um formato só
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers = []
        uv_logger.propagate = True

    # SQL do SQLAlchemy só em DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if level_name == "DEBUG" else logging.WARNING
    )
