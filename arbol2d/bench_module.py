"""
Benchmark del árbol 2D: tiempo de construcción y búsqueda comparada
contra un recorrido lineal de los mismos puntos.
"""
from typing import List, Optional, Tuple
import time
import numpy as np

from geo_module import Item, Point
from kd_tree_module import Node, build, find_nearest, find_nearest_traced
from datos_module import random_items
from config_module import BENCH_SIZE, BENCH_SEED, BENCH_QUERIES, LAT_RANGO, LON_RANGO
from logger_module import get_logger

logger = get_logger(__name__)


def busqueda_lineal(items: List[Item], consulta: Point) -> Optional[Item]:
    mejor = None
    mejor_d = float("inf")
    for it in items:
        d = it.point.square_distance(consulta)
        if d < mejor_d:
            mejor, mejor_d = it, d
    return mejor


def consultas_aleatorias(q: int, seed: int) -> List[Point]:
    rng = np.random.default_rng(seed + 1)
    lats = rng.uniform(LAT_RANGO[0], LAT_RANGO[1], q)
    lons = rng.uniform(LON_RANGO[0], LON_RANGO[1], q)
    return [Point(float(a), float(b)) for a, b in zip(lats, lons)]


def medir_construccion(n: int, seed: int) -> Tuple[Node, List[Item], float]:
    items = random_items(n, seed)
    t0 = time.perf_counter()
    arbol = build(list(items))
    return arbol, items, time.perf_counter() - t0


def medir_busquedas(arbol: Node, items: List[Item], queries: int, seed: int) -> dict:
    consultas = consultas_aleatorias(queries, seed)

    t0 = time.perf_counter()
    res_arbol = [find_nearest(arbol, q) for q in consultas]
    t_arbol = time.perf_counter() - t0

    t0 = time.perf_counter()
    res_lineal = [busqueda_lineal(items, q) for q in consultas]
    t_lineal = time.perf_counter() - t0

    # se compara por distancia: con puntos repetidos el item puede diferir
    distintos = sum(
        1 for q, a, b in zip(consultas, res_arbol, res_lineal)
        if a.point.square_distance(q) != b.point.square_distance(q)
    )
    visitados = [find_nearest_traced(arbol, q)[2] for q in consultas]

    n = max(1, len(consultas))
    return {
        "tiempo_arbol_s": t_arbol / n,
        "tiempo_lineal_s": t_lineal / n,
        "nodos_promedio": sum(visitados) / n,
        "desacuerdos": distintos,
    }


def ejecutar(n: int = BENCH_SIZE, seed: int = BENCH_SEED, queries: int = BENCH_QUERIES) -> dict:
    arbol, items, t_build = medir_construccion(n, seed)
    resultado = {"puntos": n, "altura": arbol.height(), "tiempo_construccion_s": t_build}
    if n > 0 and queries > 0:
        resultado.update(medir_busquedas(arbol, items, queries, seed))
    if resultado.get("desacuerdos"):
        logger.error("El árbol y la búsqueda lineal difieren en %d consultas", resultado["desacuerdos"])
    return resultado


def imprimir(resultado: dict) -> None:
    for clave, valor in resultado.items():
        if isinstance(valor, float):
            print(f"{clave}={valor:.6f}")
        else:
            print(f"{clave}={valor}")


def main() -> None:
    imprimir(ejecutar())


if __name__ == "__main__":
    main()
