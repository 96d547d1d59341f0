import logging
import os

LOGGER_NAME = "arbol2d"


def nivel_desde_env(nombre: str) -> int:
    """Nivel de logging por nombre; INFO si el nombre no es válido."""
    nivel = logging.getLevelName(nombre.strip().upper())
    return nivel if isinstance(nivel, int) else logging.INFO


NIVEL_CONFIGURADO = nivel_desde_env(os.environ.get("ARBOL2D_LOG_LEVEL", "INFO"))

logger = logging.getLogger(LOGGER_NAME)

if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("[%(name)s] %(levelname)s: %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

logger.setLevel(NIVEL_CONFIGURADO)


def get_logger(name: str) -> logging.Logger:
    """Logger hijo de `arbol2d` para un módulo."""
    return logger.getChild(name)


def set_debug(enabled: bool) -> None:
    logger.setLevel(logging.DEBUG if enabled else NIVEL_CONFIGURADO)
