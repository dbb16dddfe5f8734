# http_a_tcp.py
import logging

from flask import Flask, Response, abort, jsonify, request
from flask_cors import CORS
from pydantic import BaseModel, ValidationError

from relay_config import RelaySettings, configure_logging
from static_files import read_static_file
from tcp_bridge import BridgeErrorKind, TcpBridge

CORS_ORIGIN = "*"
CORS_METHODS = "POST, OPTIONS"
CORS_HEADERS = "Content-Type"

ERROR_STATUS = {
    BridgeErrorKind.CONNECTION: 500,
    BridgeErrorKind.PROTOCOL: 502,
    BridgeErrorKind.TIMEOUT: 504,
}


class ConversionRequest(BaseModel):
    text: str


def describe_validation_error(error):
    """Resume los errores de pydantic en una línea legible."""
    parts = []
    for err in error.errors():
        location = ".".join(str(loc) for loc in err["loc"]) or "body"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


def create_app(settings=None, bridge=None):
    settings = settings or RelaySettings()
    bridge = bridge or TcpBridge(
        settings.DOWNSTREAM_HOST,
        settings.DOWNSTREAM_PORT,
        timeout=settings.DOWNSTREAM_TIMEOUT_SECONDS,
        validate_json=settings.VALIDATE_DOWNSTREAM_JSON,
    )

    app = Flask(__name__, static_folder=None)
    app.config["RELAY_SETTINGS"] = settings
    app.extensions["tcp_bridge"] = bridge

    # Registrado antes que flask-cors: se ejecuta después y solo completa
    # los encabezados que flask-cors no puso.
    @app.after_request
    def apply_cors_headers(response):
        response.headers.setdefault("Access-Control-Allow-Origin", CORS_ORIGIN)
        response.headers.setdefault("Access-Control-Allow-Methods", CORS_METHODS)
        response.headers.setdefault("Access-Control-Allow-Headers", CORS_HEADERS)
        return response

    CORS(
        app,
        origins=CORS_ORIGIN,
        methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        send_wildcard=True,
    )

    @app.before_request
    def preflight():
        logging.info(f"{request.method} {request.path}")
        if request.method == "OPTIONS":
            return Response(status=204)
        return None

    @app.errorhandler(404)
    @app.errorhandler(405)
    def not_found(error):
        return Response(status=404)

    def convert():
        try:
            conversion = ConversionRequest.model_validate_json(request.get_data())
        except ValidationError as e:
            message = describe_validation_error(e)
            logging.warning(f"Pedido de conversión inválido: {message}")
            return jsonify({"error": message}), 400

        result = app.extensions["tcp_bridge"].forward(conversion.text)
        if result.ok:
            return Response(result.payload, status=200, content_type="application/json")

        return jsonify({"error": result.error}), ERROR_STATUS[result.error_kind]

    app.add_url_rule(settings.CONVERT_PATH, "convert", convert, methods=["POST"])

    @app.route("/", defaults={"filename": ""}, methods=["GET"])
    @app.route("/<path:filename>", methods=["GET"])
    def serve_static(filename):
        if request.path == settings.CONVERT_PATH:
            abort(404)

        static_file = read_static_file(settings.STATIC_DIR, filename, settings.DEFAULT_DOCUMENT)
        if static_file is None:
            return Response("File Not Found", status=404, content_type="text/plain")

        return Response(static_file.content, status=200, content_type=static_file.content_type)

    return app


def main():
    settings = RelaySettings()
    configure_logging(settings.LOG_LEVEL)
    app = create_app(settings)
    logging.info(f"Proxy HTTP iniciado en http://{settings.HOST}:{settings.PORT}")
    logging.info(
        f"Conectando al servidor TCP en {settings.DOWNSTREAM_HOST}:{settings.DOWNSTREAM_PORT}"
    )
    app.run(host=settings.HOST, port=settings.PORT, threaded=True)


if __name__ == '__main__':
    main()
