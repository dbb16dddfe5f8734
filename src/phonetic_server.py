# ============================================
# Programa: phonetic_server.py
# Versión: 2.0
# Descripción: Servidor TCP fonético. Recibe {"text": ...} y responde
#              {"phonetic": ...}, un intercambio por conexión
# ============================================

import json
import logging
import socket
import threading

from pydantic import BaseModel, ValidationError

from phonetic_mapping import load_ipa_dictionary, text_to_phonetic
from relay_config import PhoneticServerSettings, configure_logging

RECV_BUFFER = 4096
ACCEPT_POLL_SECONDS = 0.5


class RequestTooLarge(Exception):
    pass


class PhoneticRequest(BaseModel):
    text: str


class PhoneticResponse(BaseModel):
    phonetic: str


# ===========================================================
# SERVIDOR
# ===========================================================
class PhoneticServer:
    """Servidor TCP con un hilo por conexión."""
    def __init__(self, host, port, dictionary=None, settings=None):
        settings = settings or PhoneticServerSettings()
        self.dictionary = dictionary if dictionary is not None else {}
        self.client_timeout = settings.CLIENT_TIMEOUT_SECONDS
        self.max_request_bytes = settings.MAX_REQUEST_BYTES
        self._stop = threading.Event()
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind((host, port))
        self.sock.listen(5)
        self.sock.settimeout(ACCEPT_POLL_SECONDS)
        self.host, self.port = self.sock.getsockname()[:2]
        logging.info(f"Servidor escuchando en {self.host}:{self.port}")

    def start(self):
        try:
            while not self._stop.is_set():
                try:
                    conn, addr = self.sock.accept()
                except socket.timeout:
                    continue
                logging.info(f"Conexión aceptada desde {addr}")
                threading.Thread(target=self.handle_client, args=(conn, addr), daemon=True).start()
        except KeyboardInterrupt:
            logging.info("Servidor detenido manualmente")
        finally:
            self.sock.close()

    def stop(self):
        self._stop.set()

    # ------------------------------------
    # CLIENT HANDLER
    # ------------------------------------
    def handle_client(self, conn, addr):
        conn.settimeout(self.client_timeout)
        try:
            data = self._recv_request(conn)
            if not data:
                logging.warning(f"Conexión vacía desde {addr}")
                return

            logging.debug(f"Datos crudos recibidos de {addr}: {data[:300]!r}")
            try:
                request = PhoneticRequest.model_validate_json(data)
            except ValidationError as e:
                logging.warning(f"Pedido inválido desde {addr}: {e.error_count()} error(es)")
                self._send_json(conn, {"error": f"Pedido inválido: {e.errors()[0]['msg']}"})
                return

            phonetic = text_to_phonetic(request.text, self.dictionary)
            conn.sendall(PhoneticResponse(phonetic=phonetic).model_dump_json().encode("utf-8"))
            logging.info(f"Conversión enviada a {addr} ({len(request.text.split())} palabras)")

        except RequestTooLarge as e:
            logging.warning(f"Pedido rechazado desde {addr}: {e}")
            try:
                self._send_json(conn, {"error": str(e)})
            except OSError:
                logging.debug(f"No se pudo informar el error a {addr}")
        except socket.timeout:
            logging.warning(f"Tiempo de espera agotado con {addr}")
        except Exception as e:
            logging.exception(f"Error manejando cliente {addr}: {e}")
            try:
                self._send_json(conn, {"error": str(e)})
            except OSError:
                logging.debug(f"No se pudo informar el error a {addr}")
        finally:
            conn.close()
            logging.debug(f"Conexión cerrada con {addr}")

    # ------------------------------------
    # AUXILIARES
    # ------------------------------------
    def _recv_request(self, conn):
        """Lee hasta tener un documento JSON completo o hasta el cierre del cliente."""
        chunks = []
        size = 0
        while True:
            chunk = conn.recv(RECV_BUFFER)
            if not chunk:
                break
            chunks.append(chunk)
            size += len(chunk)
            if size > self.max_request_bytes:
                raise RequestTooLarge(f"El pedido supera {self.max_request_bytes} bytes")
            # un objeto JSON completo termina en "}"
            if not chunk.rstrip().endswith(b"}"):
                continue
            data = b"".join(chunks)
            try:
                json.loads(data)
            except ValueError:
                continue
            return data
        return b"".join(chunks)

    def _send_json(self, conn, obj):
        conn.sendall(json.dumps(obj, ensure_ascii=False).encode("utf-8"))


# ===========================================================
# MAIN
# ===========================================================
def main():
    settings = PhoneticServerSettings()
    configure_logging(settings.LOG_LEVEL)
    dictionary = load_ipa_dictionary(settings.DICT_PATH)
    PhoneticServer(settings.HOST, settings.PORT, dictionary, settings).start()


if __name__ == "__main__":
    main()
