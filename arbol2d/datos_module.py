"""
Carga de datos para el árbol 2D.
- CSV (ciudad, latitud, longitud) con pandas
- Líneas de texto "LATITUD LONGITUD VALOR" (entrada estándar del CLI)
- Puntos aleatorios reproducibles para el benchmark
"""
from typing import Iterable, List
import numpy as np
import pandas as pd

from geo_module import Item
from config_module import LAT_RANGO, LON_RANGO
from logger_module import get_logger

logger = get_logger(__name__)

COLUMNAS = ["ciudad", "latitud", "longitud"]


class DatosError(ValueError):
    """Datos de entrada mal formados."""


# -------------------------------------------------------------
# CSV
# -------------------------------------------------------------
def load_csv(fuente) -> List[Item]:
    """Lee un CSV (ruta o archivo abierto) y retorna la lista de items."""
    try:
        df = pd.read_csv(fuente)
    except pd.errors.EmptyDataError as exc:
        raise DatosError("CSV vacío") from exc

    df.columns = [str(c).lower().strip() for c in df.columns]
    if not set(COLUMNAS).issubset(df.columns):
        # sin cabecera solo si la primera fila ya era un dato (lat, lon numéricos)
        if df.shape[1] != len(COLUMNAS) or not all(_es_numero(c) for c in df.columns[1:]):
            raise DatosError(f"Se esperaban columnas {COLUMNAS}, hay {list(df.columns)}")
        if hasattr(fuente, "seek"):
            fuente.seek(0)
        df = pd.read_csv(fuente, header=None)
        df.columns = COLUMNAS

    return items_from_frame(df)


def _es_numero(texto: str) -> bool:
    try:
        float(texto)
    except ValueError:
        return False
    return True


def items_from_frame(df: pd.DataFrame) -> List[Item]:
    faltan = [c for c in COLUMNAS if c not in df.columns]
    if faltan:
        raise DatosError(f"Faltan columnas: {faltan}")

    df = df[COLUMNAS].copy()
    df["latitud"] = pd.to_numeric(df["latitud"], errors="coerce")
    df["longitud"] = pd.to_numeric(df["longitud"], errors="coerce")
    total = len(df)
    df = df.dropna().reset_index(drop=True)
    if len(df) < total:
        logger.warning("Se descartaron %d filas sin coordenadas", total - len(df))

    return [
        Item.at(float(r["latitud"]), float(r["longitud"]), r["ciudad"])
        for _, r in df.iterrows()
    ]


# -------------------------------------------------------------
# Líneas de texto
# -------------------------------------------------------------
def parse_lines(lineas: Iterable[str]) -> List[Item]:
    """Cada línea: LATITUD LONGITUD VALOR (el valor puede tener espacios)."""
    items: List[Item] = []
    for num, linea in enumerate(lineas, start=1):
        linea = linea.strip()
        if not linea or linea.startswith("#"):
            continue

        partes = linea.split(None, 2)
        if len(partes) < 3:
            raise DatosError(f"Línea {num}: se esperaba 'LATITUD LONGITUD VALOR'")
        try:
            lat, lon = float(partes[0]), float(partes[1])
        except ValueError as exc:
            raise DatosError(f"Línea {num}: coordenada inválida") from exc
        items.append(Item.at(lat, lon, partes[2]))
    return items


# -------------------------------------------------------------
# Aleatorios
# -------------------------------------------------------------
def random_items(n: int, seed: int) -> List[Item]:
    """n items con valor = índice de inserción, reproducibles por semilla."""
    rng = np.random.default_rng(seed)
    lats = rng.uniform(LAT_RANGO[0], LAT_RANGO[1], n)
    lons = rng.uniform(LON_RANGO[0], LON_RANGO[1], n)
    return [Item.at(float(lat), float(lon), i) for i, (lat, lon) in enumerate(zip(lats, lons))]
