"""
Configuración del explorador y del benchmark.
Las rutas y el nivel de log pueden cambiarse por variables de entorno.
"""
import os

# Ruta del dataset (válida en local y si se instala el paquete)
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DATA_LOCAL_PATH = os.environ.get(
    "ARBOL2D_DATA", os.path.join(BASE_DIR, "data", "DatasetCoordenadas.csv")
)

# Benchmark (mismo rango de puntos que la generación aleatoria)
BENCH_SIZE = 1000
BENCH_SEED = 3
BENCH_QUERIES = 200
LAT_RANGO = (50.0, 60.0)
LON_RANGO = (30.0, 40.0)

# Mapa
ZOOM_INICIAL = 6
MAPA_ANCHO = 900
MAPA_ALTO = 600
