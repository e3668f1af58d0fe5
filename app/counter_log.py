import os
import json
import logging
import threading


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL, format="%(message)s")


def log_json(level_func, payload: dict) -> None:
    payload = {
        **payload,
        "pid": os.getpid(),
        "tid": threading.get_ident(),
    }
    level_func(json.dumps(payload, ensure_ascii=False))
