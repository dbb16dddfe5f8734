# ============================================
# Programa: relay_config.py
# Versión: 2.0
# Descripción: Configuración del relay HTTP→TCP y del servicio fonético
#              (variables de entorno y archivo .env)
# ============================================

import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
STATIC_ROOT = Path(__file__).resolve().parent / "static"


class RelaySettings(BaseSettings):
    """Configuración del frontend HTTP y del puente TCP."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="RELAY_",
        case_sensitive=False,
        extra="ignore",
    )

    # Servidor HTTP
    HOST: str = Field(default="127.0.0.1", description="Dirección de escucha HTTP")
    PORT: int = Field(default=3000, description="Puerto de escucha HTTP")

    # Servicio TCP remoto
    DOWNSTREAM_HOST: str = Field(default="127.0.0.1", description="Host del servicio TCP")
    DOWNSTREAM_PORT: int = Field(default=3005, description="Puerto del servicio TCP")
    DOWNSTREAM_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="Tiempo máximo para conectar, enviar y recibir del servicio TCP",
    )
    VALIDATE_DOWNSTREAM_JSON: bool = Field(
        default=False,
        description="Rechazar (502) respuestas del servicio TCP que no sean JSON",
    )

    # Archivos estáticos
    STATIC_DIR: Path = Field(default=STATIC_ROOT, description="Raíz de archivos estáticos")
    DEFAULT_DOCUMENT: str = Field(default="index.html", description="Documento servido en /")

    CONVERT_PATH: str = Field(default="/convert", description="Ruta del endpoint de conversión")

    LOG_LEVEL: str = Field(default="INFO", description="Nivel de logging")


class PhoneticServerSettings(BaseSettings):
    """Configuración del servidor TCP fonético."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PHONETIC_",
        case_sensitive=False,
        extra="ignore",
    )

    HOST: str = Field(default="127.0.0.1", description="Dirección de escucha TCP")
    PORT: int = Field(default=3005, description="Puerto de escucha TCP")
    CLIENT_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Tiempo máximo de inactividad por conexión de cliente",
    )
    MAX_REQUEST_BYTES: int = Field(
        default=1024 * 1024,
        gt=0,
        description="Tamaño máximo de un pedido",
    )
    DICT_PATH: Path = Field(
        default=Path("en_UK.txt"),
        description="Diccionario de pronunciación IPA (palabra /ipa/ por línea)",
    )
    LOG_LEVEL: str = Field(default="INFO", description="Nivel de logging")


def configure_logging(level="INFO"):
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
