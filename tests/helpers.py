from __future__ import annotations

import requests


def make_response(html: str, status: int = 200, url: str = "https://example.com/") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = html.encode("utf-8")
    resp.encoding = "utf-8"
    resp.url = url
    return resp


class FakeSession:
    """requests.Session 대용. 응답 큐를 공유하고 호출/종료를 기록한다."""

    def __init__(self, factory: "SessionFactory"):
        self.factory = factory
        self.headers: dict = {}
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.factory.calls.append({"url": url, "params": params, "timeout": timeout})
        if not self.factory.responses:
            raise requests.ConnectionError("no canned response left")
        resp = self.factory.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp

    def close(self):
        self.closed = True


class SessionFactory:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list = []
        self.sessions: list[FakeSession] = []

    def __call__(self):
        session = FakeSession(self)
        self.sessions.append(session)
        return session


class SleepRecorder:
    def __init__(self):
        self.calls: list = []

    def __call__(self, seconds):
        self.calls.append(seconds)
