import os
import sys
import logging
from dataclasses import dataclass

import requests

from counter_log import log_json


logger = logging.getLogger("counter-client")

COUNTER_URL = os.getenv("COUNTER_URL", "http://127.0.0.1:8080")


class ClientError(Exception):
    BAD_URL = "BadUrl"
    TIMEOUT = "Timeout"
    NETWORK_ERROR = "NetworkError"
    BAD_STATUS = "BadStatus"
    BAD_BODY = "BadBody"

    def __init__(self, kind: str, detail: str | None = None):
        self.kind = kind
        self.detail = detail
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.detail is None:
            return self.kind
        return f"{self.kind} {self.detail}"


@dataclass(frozen=True)
class Loading:
    pass


@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class Failure:
    error: str


class CounterClient:
    def __init__(self, base_url: str = COUNTER_URL, session=None, timeout: float | None = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str) -> requests.Response:
        url = self.base_url + path
        try:
            response = self.session.request(method, url, timeout=self.timeout)
        except (requests.exceptions.MissingSchema,
                requests.exceptions.InvalidSchema,
                requests.exceptions.InvalidURL) as e:
            raise self._fail(ClientError(ClientError.BAD_URL, url), e)
        except requests.exceptions.Timeout as e:
            raise self._fail(ClientError(ClientError.TIMEOUT), e)
        except requests.exceptions.RequestException as e:
            raise self._fail(ClientError(ClientError.NETWORK_ERROR), e)

        if not 200 <= response.status_code < 300:
            raise self._fail(ClientError(ClientError.BAD_STATUS, str(response.status_code)))
        return response

    @staticmethod
    def _fail(error: ClientError, cause: Exception | None = None) -> ClientError:
        payload = {"event": "request_failed", "error": str(error)}
        if cause is not None:
            payload["cause"] = str(cause)
        log_json(logger.warning, payload)
        error.__cause__ = cause
        return error

    def fetch(self) -> str:
        text = self._request("GET", "/").text.strip()
        try:
            int(text)
        except ValueError:
            raise self._fail(ClientError(ClientError.BAD_BODY, f"not an integer: {text!r}"))
        return text

    def increment(self) -> None:
        self._request("POST", "/increment")

    def decrement(self) -> None:
        self._request("POST", "/decrement")


class CounterView:
    def __init__(self, client: CounterClient):
        self.client = client
        self.state = Loading()

    def start(self):
        return self.refresh()

    def refresh(self):
        self.state = Loading()
        try:
            self.state = Success(self.client.fetch())
        except ClientError as e:
            self.state = Failure(str(e))
        return self.state

    def increment(self):
        return self._mutate(self.client.increment)

    def decrement(self):
        return self._mutate(self.client.decrement)

    def _mutate(self, action):
        self.state = Loading()
        try:
            action()
        except ClientError as e:
            self.state = Failure(str(e))
            return self.state
        return self.refresh()


def render(state) -> str:
    if isinstance(state, Success):
        return f"[ - ]  {state.text}  [ + ]"
    if isinstance(state, Failure):
        return f"Error: {state.error}"
    return "Loading..."


def main(stdin=sys.stdin, stdout=sys.stdout) -> None:
    view = CounterView(CounterClient(COUNTER_URL))
    print(render(view.start()), file=stdout)

    commands = {"+": view.increment, "-": view.decrement, "r": view.refresh}
    for line in stdin:
        command = line.strip()
        if command == "q":
            break
        if command not in commands:
            print("commands: + increment, - decrement, r refresh, q quit", file=stdout)
            continue
        print(render(commands[command]()), file=stdout)


if __name__ == "__main__":
    main()
