import logging

import pytest

from logger_module import NIVEL_CONFIGURADO, logger, nivel_desde_env, set_debug


@pytest.mark.parametrize("nombre,nivel", [
    ("INFO", logging.INFO),
    ("warning", logging.WARNING),
    (" debug ", logging.DEBUG),
    ("nope", logging.INFO),
    ("", logging.INFO),
])
def test_nivel_desde_env(nombre, nivel):
    assert nivel_desde_env(nombre) == nivel


def test_set_debug_restores_configured_level():
    set_debug(True)
    assert logger.level == logging.DEBUG
    set_debug(False)
    assert logger.level == NIVEL_CONFIGURADO
