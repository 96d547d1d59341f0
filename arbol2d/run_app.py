"""
Explorador del árbol 2D (Streamlit).
"""
import streamlit as st
import pandas as pd
import folium
from streamlit_folium import st_folium
import sys, os, time
import colorsys
import io

# Asegurar que los módulos se importen desde la carpeta del proyecto
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from geo_module import Item, Point
from kd_tree_module import build, upsert, find_nearest_traced, stats
from datos_module import DatosError, load_csv
from bench_module import busqueda_lineal
from config_module import DATA_LOCAL_PATH, ZOOM_INICIAL, MAPA_ANCHO, MAPA_ALTO
from logger_module import get_logger

logger = get_logger("run_app")

# --------------------------
# Configuración de la app
# --------------------------
st.set_page_config(layout="wide", page_title="Árbol 2D Explorer")
st.title("🌍 Árbol 2D Explorer")

st.write("Construye el árbol, busca el vecino más cercano e inserta o actualiza puntos.")

# --------------------------
# Menú lateral: datos
# --------------------------
st.sidebar.title("Datos")
modo_carga = st.sidebar.radio("Fuente de datos:", ("Dataset interno", "Subir CSV"))

items = None
fuente_id = None
try:
    if modo_carga == "Subir CSV":
        archivo = st.sidebar.file_uploader("Sube CSV (ciudad, latitud, longitud)", type=["csv", "txt"])
        if archivo is not None:
            items = load_csv(archivo)
            fuente_id = ("csv", archivo.name, archivo.size)
    else:
        items = load_csv(DATA_LOCAL_PATH)
        fuente_id = ("interno", DATA_LOCAL_PATH)
except (DatosError, OSError) as e:
    logger.error("No se pudo cargar el dataset: %s", e)
    st.error(f"No se pudo leer el CSV: {e}")
    st.stop()

if not items:
    st.warning("Cargue datos (dataset interno o suba un CSV).")
    st.stop()

# --------------------------
# Árbol persistente entre interacciones (los upserts se conservan)
# --------------------------
reconstruir = st.sidebar.button("Reconstruir árbol")
if reconstruir or st.session_state.get("fuente_id") != fuente_id:
    t0 = time.perf_counter()
    st.session_state.arbol = build(list(items))
    st.session_state.tiempo_build = time.perf_counter() - t0
    st.session_state.fuente_id = fuente_id
    st.session_state.resultado_nn = None

arbol = st.session_state.arbol
todos = arbol.items()

# vista previa
st.subheader("Vista previa de datos")
st.dataframe(pd.DataFrame(
    [{"valor": it.value, "latitud": it.latitude, "longitud": it.longitude} for it in todos]
).head(20))

lat_centro = sum(it.latitude for it in todos) / len(todos)
lon_centro = sum(it.longitude for it in todos) / len(todos)


def crear_mapa_base():
    m = folium.Map(location=[lat_centro, lon_centro], zoom_start=ZOOM_INICIAL, control_scale=True)
    # dibujar todos los puntos
    for it in todos:
        folium.CircleMarker(location=[it.latitude, it.longitude], radius=3, color="#3388ff",
                            fill=True, tooltip=str(it.value)).add_to(m)
    return m


def dibujar_resultado(r):
    """Mapa con la consulta, el vecino, la línea entre ambos y el recorrido."""
    mapa = crear_mapa_base()
    q, mejor = r["consulta"], r["punto"]

    folium.Marker(location=[q.latitude, q.longitude], popup="Consulta",
                  icon=folium.Icon(color="green")).add_to(mapa)
    folium.Marker(location=[mejor.latitude, mejor.longitude], popup=str(mejor.value),
                  icon=folium.Icon(color="red")).add_to(mapa)
    folium.PolyLine([[q.latitude, q.longitude], [mejor.latitude, mejor.longitude]],
                    weight=2).add_to(mapa)

    # recorrido de los nodos visitados (amarillo -> rojo)
    n = len(r["recorrido"])
    for i, p in enumerate(r["recorrido"]):
        t = i / max(1, n - 1)
        rr, g, b = colorsys.hsv_to_rgb(0.12 - 0.12 * t, 1, 1)
        color_hex = "#{:02x}{:02x}{:02x}".format(int(rr * 255), int(g * 255), int(b * 255))
        folium.CircleMarker(location=[p.latitude, p.longitude], radius=5, color=color_hex,
                            fill=True, fill_opacity=0.9).add_to(mapa)

    st_folium(mapa, width=MAPA_ANCHO, height=MAPA_ALTO)


def buscar(consulta: Point):
    mejor, dist, nodos_v, elapsed, recorrido = find_nearest_traced(arbol, consulta)
    if mejor is None:
        return None
    return {"consulta": consulta, "punto": mejor, "dist": dist, "nodos": nodos_v,
            "tiempo": elapsed, "recorrido": recorrido}


# --------------------------
# Métricas
# --------------------------
est = stats(arbol)
st.subheader("Árbol 2D — Métricas")
col1, col2, col3 = st.columns(3)
col1.metric("Puntos", est["puntos"])
col2.metric("Altura", est["altura"])
col3.metric("Tiempo construcción (s)", f"{st.session_state.tiempo_build:.6f}")

tab_nn, tab_upsert, tab_cmp = st.tabs(["Vecino más cercano", "Insertar / actualizar", "Comparación"])

# ==============================
# TAB 1: vecino más cercano
# ==============================
with tab_nn:
    st.write("Haz clic en el mapa o ingresa coordenadas manualmente.")

    mapa_data = st_folium(crear_mapa_base(), width=MAPA_ANCHO, height=MAPA_ALTO, key="mapa_nn")
    last_clicked = mapa_data.get("last_clicked") if mapa_data else None
    if last_clicked:
        st.session_state.resultado_nn = buscar(Point(last_clicked["lat"], last_clicked["lng"]))

    colA, colB = st.columns(2)
    lat_in = colA.number_input("Latitud (manual)", value=lat_centro, format="%.6f")
    lon_in = colB.number_input("Longitud (manual)", value=lon_centro, format="%.6f")
    if st.button("Buscar vecino más cercano"):
        st.session_state.resultado_nn = buscar(Point(lat_in, lon_in))

    r = st.session_state.get("resultado_nn")
    if r:
        st.subheader("Resultado")
        st.write(f"Valor: **{r['punto'].value}**")
        st.write(f"Distancia (grados): {r['dist']:.6f}")
        st.write(f"Nodos visitados: {r['nodos']}")
        st.write(f"Tiempo (s): {r['tiempo']:.6f}")
        dibujar_resultado(r)

# ==============================
# TAB 2: upsert
# ==============================
with tab_upsert:
    st.write("Si el punto ya existe se actualiza su valor; si no, se inserta un nodo nuevo.")
    with st.form("form_upsert"):
        c1, c2, c3 = st.columns(3)
        lat_u = c1.number_input("Latitud", value=lat_centro, format="%.6f")
        lon_u = c2.number_input("Longitud", value=lon_centro, format="%.6f")
        valor_u = c3.text_input("Valor", value="nuevo punto")
        enviado = st.form_submit_button("Insertar / actualizar")

    if enviado:
        antes = len(arbol)
        upsert(arbol, Item.at(lat_u, lon_u, valor_u))
        if len(arbol) > antes:
            st.success(f"Insertado '{valor_u}' en ({lat_u:.6f}, {lon_u:.6f})")
        else:
            st.success(f"Actualizado el punto ({lat_u:.6f}, {lon_u:.6f}) con valor '{valor_u}'")
        st.session_state.resultado_nn = None

# ==============================
# TAB 3: árbol vs búsqueda lineal
# ==============================
with tab_cmp:
    import matplotlib.pyplot as plt

    st.write("Compara el árbol contra un recorrido lineal para la consulta manual.")
    if st.button("Ejecutar comparación"):
        consulta = Point(lat_in, lon_in)
        mejor, dist, nodos_v, t_arbol, _ = find_nearest_traced(arbol, consulta)

        t0 = time.perf_counter()
        lineal = busqueda_lineal(todos, consulta)
        t_lineal = time.perf_counter() - t0

        df_cmp = pd.DataFrame([
            {"estructura": "Árbol 2D", "valor": mejor.value, "nodos_visitados": nodos_v, "tiempo_s": t_arbol},
            {"estructura": "Lineal", "valor": lineal.value, "nodos_visitados": len(todos), "tiempo_s": t_lineal},
        ])
        st.dataframe(df_cmp)

        fig, ax = plt.subplots(1, 2, figsize=(10, 4))
        df_plot = df_cmp.set_index("estructura")
        df_plot["tiempo_s"].plot.bar(ax=ax[0], title="Tiempo NN (s)")
        df_plot["nodos_visitados"].plot.bar(ax=ax[1], title="Nodos visitados")
        plt.tight_layout()
        st.pyplot(fig)

        # descargar csv
        csv_buf = io.StringIO()
        df_cmp.to_csv(csv_buf, index=False)
        st.download_button("Descargar CSV", data=csv_buf.getvalue().encode("utf-8"),
                           file_name="comparacion_nn.csv", mime="text/csv")
