# ============================================
# Programa: static_files.py
# Versión: 2.0
# Descripción: Lectura de archivos estáticos contenida en la raíz configurada
# ============================================

import logging
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CONTENT_TYPE = "text/html"
CONTENT_TYPES = {".css": "text/css"}


@dataclass(frozen=True)
class StaticFileResponse:
    path: Path
    content: bytes
    content_type: str


def content_type_for(path):
    """Tipo de contenido por sufijo, sin inspeccionar el archivo."""
    return CONTENT_TYPES.get(Path(path).suffix.lower(), DEFAULT_CONTENT_TYPE)


def resolve_static_path(root, request_path, default_document="index.html"):
    """Resuelve la ruta pedida dentro de root.

    Devuelve None si la ruta normalizada queda fuera de la raíz o no es
    una ruta válida.
    """
    relative = request_path.lstrip("/") or default_document
    if "\x00" in relative:
        return None
    base = Path(root).resolve()
    try:
        candidate = (base / relative).resolve()
    except ValueError:
        return None
    if candidate != base and base not in candidate.parents:
        return None
    return candidate


def read_static_file(root, request_path, default_document="index.html"):
    path = resolve_static_path(root, request_path, default_document)
    if path is None:
        logging.warning(f"Ruta estática rechazada: {request_path!r}")
        return None

    try:
        content = path.read_bytes()
    except (OSError, ValueError) as e:
        logging.info(f"Archivo no disponible {path}: {e}")
        return None

    return StaticFileResponse(path=path, content=content, content_type=content_type_for(path))
