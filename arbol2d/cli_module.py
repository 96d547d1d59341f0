"""
Línea de comandos del árbol 2D.

    arbol2d print   < puntos.txt
    arbol2d nearest 55.2 35.1 --input puntos.txt
    arbol2d upsert 55.0 35.0 "nuevo valor" --input puntos.txt
    arbol2d bench --size 10000
    arbol2d app

La entrada son líneas "LATITUD LONGITUD VALOR".
"""
from typing import List, Optional
import argparse
import os
import subprocess
import sys

import bench_module
from datos_module import DatosError, load_csv, parse_lines
from geo_module import Item, Point
from kd_tree_module import Node, build, find_nearest_traced, upsert
from config_module import BENCH_SIZE, BENCH_SEED, BENCH_QUERIES
from logger_module import get_logger, set_debug

logger = get_logger(__name__)


# -------------------------------
# Impresión del árbol
# -------------------------------
def format_tree(node: Node) -> List[str]:
    """Una línea por nodo, sangrada por nivel ('<' izquierda, '>' derecha)."""
    lineas: List[str] = []
    pila = [(node, 0, "")]
    while pila:
        nodo, nivel, lado = pila.pop()
        if nodo.is_empty:
            continue
        it = nodo.item
        lineas.append(f"{'  ' * nivel}{lado}Lat {it.latitude} Long {it.longitude} Value {it.value}")
        pila.append((nodo.der, nivel + 1, "> "))
        pila.append((nodo.izq, nivel + 1, "< "))
    return lineas


def _leer_items(args) -> List[Item]:
    if getattr(args, "csv", None):
        return load_csv(args.csv)
    if args.input:
        with open(args.input, "r", encoding="utf-8") as f:
            return parse_lines(f)
    return parse_lines(sys.stdin)


# -------------------------------
# Comandos
# -------------------------------
def cmd_print(args) -> int:
    arbol = build(_leer_items(args))
    for linea in format_tree(arbol):
        print(linea)
    return 0


def cmd_nearest(args) -> int:
    arbol = build(_leer_items(args))
    mejor, dist, nodos, elapsed, _ = find_nearest_traced(arbol, Point(args.lat, args.lon))
    if mejor is None:
        print("Árbol vacío: no hay vecino más cercano", file=sys.stderr)
        return 1

    print(f"Lat {mejor.latitude} Long {mejor.longitude} Value {mejor.value}")
    print(f"Distancia: {dist:.6f}")
    print(f"Nodos visitados: {nodos}")
    print(f"Tiempo (s): {elapsed:.6f}")
    return 0


def cmd_upsert(args) -> int:
    arbol = build(_leer_items(args))
    upsert(arbol, Item.at(args.lat, args.lon, args.value))
    for linea in format_tree(arbol):
        print(linea)
    return 0


def cmd_bench(args) -> int:
    bench_module.imprimir(bench_module.ejecutar(args.size, args.seed, args.queries))
    return 0


def cmd_app(args) -> int:
    ruta_app = os.path.join(os.path.dirname(os.path.abspath(__file__)), "run_app.py")
    comando = [sys.executable, "-m", "streamlit", "run", ruta_app]

    print("Iniciando explorador del árbol 2D...\n")
    return subprocess.run(comando).returncode


def crear_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="arbol2d", description="Árbol 2D de coordenadas (lat, lon)")
    parser.add_argument("--debug", action="store_true", help="log en nivel DEBUG")
    sub = parser.add_subparsers(dest="comando", required=True)

    p = sub.add_parser("print", help="Imprime el árbol construido desde la entrada")
    p.add_argument("--input", help="archivo de líneas LATITUD LONGITUD VALOR (por defecto stdin)")
    p.set_defaults(func=cmd_print)

    p = sub.add_parser("nearest", help="Vecino más cercano a (LAT, LON)")
    p.add_argument("lat", type=float)
    p.add_argument("lon", type=float)
    p.add_argument("--input")
    p.add_argument("--csv", help="CSV con columnas ciudad, latitud, longitud")
    p.set_defaults(func=cmd_nearest)

    p = sub.add_parser("upsert", help="Inserta o actualiza un punto e imprime el árbol")
    p.add_argument("lat", type=float)
    p.add_argument("lon", type=float)
    p.add_argument("value")
    p.add_argument("--input")
    p.set_defaults(func=cmd_upsert)

    p = sub.add_parser("bench", help="Benchmark de construcción y búsqueda")
    p.add_argument("--size", type=int, default=BENCH_SIZE)
    p.add_argument("--seed", type=int, default=BENCH_SEED)
    p.add_argument("--queries", type=int, default=BENCH_QUERIES)
    p.set_defaults(func=cmd_bench)

    p = sub.add_parser("app", help="Abre el explorador en Streamlit")
    p.set_defaults(func=cmd_app)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = crear_parser().parse_args(argv)
    if args.debug:
        set_debug(True)

    try:
        return args.func(args)
    except (DatosError, OSError) as exc:
        logger.debug("Comando %s falló", args.comando, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
