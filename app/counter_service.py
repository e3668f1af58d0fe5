import os
import json
import logging
import threading
from pathlib import Path
from flask import Flask, Response, request

from counter_log import log_json


logger = logging.getLogger("counter-service")

COUNTER_FILE = os.getenv("COUNTER_FILE", "counter.json")
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8080"))

CORS_HEADER = "Access-Control-Allow-Origin"
ALLOWED_METHODS = ("GET", "POST")


def _read_counter(path: Path) -> int:
    if not path.exists():
        return 0

    try:
        with path.open("r", encoding="utf-8") as file:
            data = json.load(file)
            value = data["counter"]
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"counter is not an integer: {value!r}")
            return value
    except Exception as e:
        log_json(logger.warning, {"event": "read_failed", "path": str(path), "error": str(e)})
        return 0

def _write_counter(path: Path, value: int) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = path.with_suffix(".tmp")
    with tmp_path.open("w", encoding="utf-8") as file:
        json.dump({"counter": value}, file)
    tmp_path.replace(path)


class CounterStore:
    def __init__(self, path: Path, value: int = 0):
        self.path = path
        self._value = value
        self._lock = threading.Lock()

    @classmethod
    def load(cls, path: Path) -> "CounterStore":
        return cls(path, _read_counter(path))

    def get(self) -> int:
        with self._lock:
            return self._value

    def add(self, delta: int) -> int:
        with self._lock:
            self._value += delta
            return self._value

    def save(self) -> None:
        with self._lock:
            _write_counter(self.path, self._value)


def _empty(status: int) -> Response:
    return Response("", status=status, mimetype="text/plain")

def create_app(counter_file: str | None = None) -> Flask:
    path = Path(counter_file or COUNTER_FILE)
    store = CounterStore.load(path)

    app = Flask(__name__)
    log_json(logger.info, {"event": "startup", "path": str(path), "counter": store.get()})

    @app.before_request
    def reject_other_methods():
        # Flask adds HEAD and OPTIONS to every route; neither may reach a view.
        if request.method not in ALLOWED_METHODS:
            return _empty(400)

    @app.route("/", methods=ALLOWED_METHODS)
    def index():
        return Response(str(store.get()), status=200, mimetype="text/plain")

    @app.route("/increment", methods=ALLOWED_METHODS)
    def increment():
        current = store.add(1)
        log_json(logger.info, {"event": "increment", "counter": current})
        return _empty(200)

    @app.route("/decrement", methods=ALLOWED_METHODS)
    def decrement():
        current = store.add(-1)
        log_json(logger.info, {"event": "decrement", "counter": current})
        return _empty(200)

    @app.errorhandler(404)
    @app.errorhandler(405)
    def bad_request(_error):
        return _empty(400)

    @app.after_request
    def persist(response: Response) -> Response:
        response.headers[CORS_HEADER] = "*"
        # A failed write propagates and turns the request into a 500.
        store.save()
        return response

    return app


app = create_app()


def main() -> None:
    app.run(host=HOST, port=PORT)


if __name__ == "__main__":
    main()
