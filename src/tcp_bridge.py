# ============================================
# Programa: tcp_bridge.py
# Versión: 2.0
# Descripción: Puente TCP de un solo intercambio. Abre una conexión por
#              pedido, envía {"text": ...} y devuelve la respuesta cruda
# ============================================

import json
import logging
import socket
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

RECV_BUFFER = 4096


class BridgeErrorKind(str, Enum):
    CONNECTION = "connection"
    TIMEOUT = "timeout"
    PROTOCOL = "protocol"


@dataclass(frozen=True)
class BridgeResult:
    """Resultado de un intercambio: payload crudo o descripción del error."""

    payload: Optional[bytes] = None
    error: Optional[str] = None
    error_kind: Optional[BridgeErrorKind] = None

    @property
    def ok(self):
        return self.error is None

    @classmethod
    def success(cls, payload):
        return cls(payload=payload)

    @classmethod
    def failure(cls, kind, message):
        return cls(error=message, error_kind=kind)


class TcpBridge:
    """Cliente TCP de un intercambio por llamada (sin pool ni reintentos).

    El pedido termina con el cierre de escritura (half-close) y la respuesta
    termina cuando el servicio remoto cierra la conexión. El timeout limita
    el intercambio completo, no cada operación.
    """

    def __init__(self, host, port, timeout=10.0, validate_json=False):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.validate_json = validate_json

    def forward(self, text):
        message = json.dumps({"text": text}).encode("utf-8")
        address = f"{self.host}:{self.port}"
        logging.info(f"Conectando al servidor TCP en {address}")

        deadline = time.monotonic() + self.timeout
        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout) as sock:
                sock.settimeout(self._remaining(deadline))
                sock.sendall(message)
                sock.shutdown(socket.SHUT_WR)
                data = self._recv_all(sock, deadline)
        except socket.timeout:
            logging.warning(f"Tiempo de espera agotado con {address}")
            return BridgeResult.failure(
                BridgeErrorKind.TIMEOUT,
                f"Tiempo de espera agotado ({self.timeout}s) con el servidor TCP {address}",
            )
        except OSError as e:
            logging.error(f"Error de conexión con {address}: {e}")
            return BridgeResult.failure(BridgeErrorKind.CONNECTION, str(e) or repr(e))

        if not data:
            logging.warning(f"Respuesta vacía desde {address}")
            return BridgeResult.failure(
                BridgeErrorKind.PROTOCOL,
                f"El servidor TCP {address} cerró la conexión sin responder",
            )

        if self.validate_json:
            try:
                json.loads(data)
            except ValueError as e:
                logging.warning(f"Respuesta no JSON desde {address}: {e}")
                return BridgeResult.failure(
                    BridgeErrorKind.PROTOCOL, f"Respuesta inválida del servidor TCP: {e}"
                )

        logging.debug(f"Respuesta recibida de {address}: {data[:300]!r}")
        return BridgeResult.success(data)

    # ------------------------------------
    # AUXILIARES
    # ------------------------------------
    def _remaining(self, deadline):
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise socket.timeout("tiempo total de intercambio agotado")
        return remaining

    def _recv_all(self, sock, deadline):
        data_chunks = []
        while True:
            sock.settimeout(self._remaining(deadline))
            chunk = sock.recv(RECV_BUFFER)
            if not chunk:
                break
            data_chunks.append(chunk)
        return b"".join(data_chunks)
