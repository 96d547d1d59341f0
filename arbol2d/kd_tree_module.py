#KD-Tree 2D (latitud, longitud) con inserción/actualización y vecino más cercano.
from dataclasses import dataclass
from typing import List, Optional, Tuple
import math
import time

from geo_module import Axis, Item, Point
from logger_module import get_logger

logger = get_logger(__name__)

# (item, distancia, nodos_visitados, tiempo_s, recorrido)
Traza = Tuple[Optional[Item], Optional[float], int, float, List[Point]]


# ============================================================
# NODO KD
# ============================================================
class Node:
    """
    Nodo del árbol. Un nodo sin item es un subárbol vacío; un nodo con item
    (un "área") tiene siempre dos hijos propios, que pueden estar vacíos.
    """
    __slots__ = ("item", "izq", "der")

    def __init__(self, item: Optional[Item] = None,
                 izq: Optional["Node"] = None, der: Optional["Node"] = None):
        self.item: Optional[Item] = item
        self.izq: Optional["Node"] = None
        self.der: Optional["Node"] = None
        if item is not None:
            self.izq = izq if izq is not None else Node()
            self.der = der if der is not None else Node()

    @classmethod
    def build(cls, items: List[Item]) -> "Node":
        return build(items)

    def upsert(self, item: Item) -> None:
        upsert(self, item)

    def find_nearest(self, point: Point) -> Optional[Item]:
        return find_nearest(self, point)

    # ----------------------------------------------------------
    # Accesos
    # ----------------------------------------------------------
    @property
    def is_empty(self) -> bool:
        return self.item is None

    @property
    def value(self):
        return None if self.item is None else self.item.value

    @property
    def left(self) -> Optional["Node"]:
        """Hijo izquierdo, o None si no hay o está vacío."""
        if self.izq is None or self.izq.is_empty:
            return None
        return self.izq

    @property
    def right(self) -> Optional["Node"]:
        """Hijo derecho, o None si no hay o está vacío."""
        if self.der is None or self.der.is_empty:
            return None
        return self.der

    # Los recorridos usan una pila explícita: los upserts ordenados pueden
    # dejar árboles tan profundos como la cantidad de puntos.
    def height(self) -> int:
        altura = 0
        pila = [(self, 0)]
        while pila:
            nodo, nivel = pila.pop()
            if nodo.is_empty:
                altura = max(altura, nivel)
                continue
            pila.append((nodo.izq, nivel + 1))
            pila.append((nodo.der, nivel + 1))
        return altura

    def items(self) -> List[Item]:
        """Todos los items en preorden."""
        out: List[Item] = []
        pila = [self]
        while pila:
            nodo = pila.pop()
            if nodo.is_empty:
                continue
            out.append(nodo.item)
            pila.append(nodo.der)
            pila.append(nodo.izq)
        return out

    def __len__(self) -> int:
        return len(self.items())

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        pila = [(self, other)]
        while pila:
            a, b = pila.pop()
            if a.item != b.item:
                return False
            if not a.is_empty:
                pila.append((a.izq, b.izq))
                pila.append((a.der, b.der))
        return True

    def __repr__(self) -> str:
        partes: List[str] = []
        pila = [self]
        while pila:
            tope = pila.pop()
            if isinstance(tope, str):
                partes.append(tope)
            elif tope.is_empty:
                partes.append("Node()")
            else:
                partes.append(f"Node({tope.item!r}, ")
                pila.extend([")", tope.der, ", ", tope.izq])
        return "".join(partes)


# ============================================================
# CANDIDATO MÁS CERCANO
# ============================================================
@dataclass(frozen=True)
class Nearest:
    metric: float   # distancia al cuadrado
    item: Item

    def closer_of(self, other: Optional["Nearest"]) -> "Nearest":
        return closer_of(self, other)


def closer_of(a: Nearest, b: Optional[Nearest]) -> Nearest:
    """El más cercano de los dos; en empate gana `a`."""
    if b is None or a.metric <= b.metric:
        return a
    return b


# ----------------------------------------------------------
# Construcción del árbol
# ----------------------------------------------------------
def build(items: List[Item]) -> Node:
    """
    Construye el árbol por mediana alternando ejes (latitud en la raíz).
    La lista se reordena en su sitio.
    """
    logger.debug("Construyendo árbol con %d items", len(items))
    return _build_rec(items, 0, len(items), Axis.Latitude)


def _build_rec(items: List[Item], inicio: int, fin: int, eje: Axis) -> Node:
    n = fin - inicio
    if n == 0:
        return Node()
    if n == 1:
        return Node(items[inicio])

    items[inicio:fin] = sorted(items[inicio:fin], key=lambda it: it.point[eje])
    mid = inicio + n // 2

    izq = _build_rec(items, inicio, mid, eje.next())
    der = _build_rec(items, mid + 1, fin, eje.next())
    return Node(items[mid], izq, der)


# ----------------------------------------------------------
# Inserción / actualización
# ----------------------------------------------------------
def upsert(node: Node, new_item: Item) -> None:
    """
    Inserta el item o, si ya existe exactamente el mismo punto, reemplaza su
    valor sin tocar la forma del árbol. Empates en el eje van a la derecha.
    """
    nodo = node
    eje = Axis.Latitude
    while not nodo.is_empty:
        actual = nodo.item
        if actual.point == new_item.point:
            nodo.item = Item(actual.point, new_item.value)
            return
        if new_item.point[eje] >= actual.point[eje]:
            nodo = nodo.der
        else:
            nodo = nodo.izq
        eje = eje.next()

    nodo.item = new_item
    nodo.izq = Node()
    nodo.der = Node()


# ----------------------------------------------------------
# Vecino más cercano
# ----------------------------------------------------------
class _Marco:
    """Nodo pendiente de la búsqueda: ya se entró a su rama cercana."""
    __slots__ = ("mejor", "lejano", "eje_hijo", "dist_plano", "en_lejano")

    def __init__(self, mejor: Nearest, lejano: Node, eje_hijo: Axis, dist_plano: float):
        self.mejor = mejor
        self.lejano = lejano
        self.eje_hijo = eje_hijo
        self.dist_plano = dist_plano
        self.en_lejano = False


def _buscar(raiz: Node, eje: Axis, consulta: Point,
            recorrido: Optional[List[Point]]) -> Optional[Nearest]:
    """
    Primero la rama cercana, luego la lejana si no se poda. Pila explícita en
    lugar de recursión; `resultado` es lo que devolvió el último subárbol.
    """
    pila: List[_Marco] = []
    pendiente: Optional[Tuple[Node, Axis]] = (raiz, eje)
    resultado: Optional[Nearest] = None

    while True:
        if pendiente is not None:
            nodo, eje = pendiente
            pendiente = None
            resultado = None
            if not nodo.is_empty:
                item = nodo.item
                if recorrido is not None:
                    recorrido.append(item.point)

                metrica = item.point.square_distance(consulta)
                if metrica == 0.0:
                    resultado = Nearest(0.0, item)
                else:
                    qcoord = consulta[eje]
                    ncoord = item.point[eje]
                    if qcoord >= ncoord:
                        cercano, lejano = nodo.der, nodo.izq
                    else:
                        cercano, lejano = nodo.izq, nodo.der
                    pila.append(_Marco(Nearest(metrica, item), lejano, eje.next(),
                                       (qcoord - ncoord) ** 2))
                    pendiente = (cercano, eje.next())
                    continue

        if not pila:
            return resultado

        marco = pila[-1]
        marco.mejor = closer_of(marco.mejor, resultado)
        # poda: la otra rama solo puede mejorar si la recta de corte está más cerca
        if not marco.en_lejano and marco.dist_plano < marco.mejor.metric:
            marco.en_lejano = True
            pendiente = (marco.lejano, marco.eje_hijo)
            continue

        pila.pop()
        resultado = marco.mejor


def find_nearest(node: Node, point: Point) -> Optional[Item]:
    """Item más cercano a `point`, o None si el árbol está vacío."""
    mejor = _buscar(node, Axis.Latitude, point, None)
    return None if mejor is None else mejor.item


def find_nearest_traced(node: Node, point: Point) -> Traza:
    """
    Retorna:
      (item, distancia, nodos_visitados, tiempo, recorrido)
    """
    if node.is_empty:
        return None, None, 0, 0.0, []

    inicio = time.perf_counter()
    recorrido: List[Point] = []
    mejor = _buscar(node, Axis.Latitude, point, recorrido)
    duracion = time.perf_counter() - inicio

    return mejor.item, math.sqrt(mejor.metric), len(recorrido), duracion, recorrido


# ----------------------------------------------------------
# Estadísticas
# ----------------------------------------------------------
def stats(node: Node) -> dict:
    return {"puntos": len(node), "altura": node.height()}
