"""
Tipos geográficos básicos del árbol 2D.
- Point: par (latitud, longitud) inmutable con distancias planas
- Axis: eje de división, alterna en cada nivel
- Item: punto + valor arbitrario (lo que se guarda en cada nodo)
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any
import math


# -------------------------------
# Eje de división
# -------------------------------
class Axis(Enum):
    Latitude = 0
    Longitude = 1

    def next(self) -> "Axis":
        """Eje del siguiente nivel (Latitude <-> Longitude)."""
        if self is Axis.Latitude:
            return Axis.Longitude
        return Axis.Latitude


# -------------------------------
# Punto (lat, lon)
# -------------------------------
@dataclass(frozen=True)
class Point:
    latitude: float
    longitude: float

    def square_distance(self, other: "Point") -> float:
        dlat = self.latitude - other.latitude
        dlon = self.longitude - other.longitude
        return dlat * dlat + dlon * dlon

    def distance(self, other: "Point") -> float:
        """Distancia euclídea plana (grados), no geodésica."""
        return math.sqrt(self.square_distance(other))

    def __getitem__(self, axis: Axis) -> float:
        if axis is Axis.Latitude:
            return self.latitude
        return self.longitude


# -------------------------------
# Item = punto + valor
# -------------------------------
@dataclass(frozen=True)
class Item:
    point: Point
    value: Any

    @classmethod
    def at(cls, latitude: float, longitude: float, value: Any) -> "Item":
        return cls(Point(latitude, longitude), value)

    @property
    def latitude(self) -> float:
        return self.point.latitude

    @property
    def longitude(self) -> float:
        return self.point.longitude
