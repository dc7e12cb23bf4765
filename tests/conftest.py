"""Shared fixtures: in-memory MongoDB, a stepping clock and a mocked LLM endpoint."""

import json
import uuid
from datetime import datetime, timedelta

import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient

from app.config.llm import LLMSettings
from app.services.message_service import MessageService
from app.services.thread_service import ThreadService
from app.utils.llm_client import LLMClient

LLM_URL = "https://llm.test/v1/chat/completions"


class SteppingClock:
    """Returns a time one minute later on every call."""

    def __init__(self, start=datetime(2024, 5, 1, 9, 0, 0), step=timedelta(minutes=1)):
        self.current = start
        self.step = step

    def __call__(self):
        now = self.current
        self.current += self.step
        return now


def completion_body(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def sse_body(chunks):
    events = [
        f"data: {json.dumps({'choices': [{'delta': {'content': chunk}}]})}\n\n"
        for chunk in chunks
    ]
    events.append("data: [DONE]\n\n")
    return "".join(events).encode()


@pytest.fixture
def database():
    return AsyncMongoMockClient()[f"freechat_test_{uuid.uuid4().hex[:8]}"]


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def thread_service(database, clock):
    return ThreadService(database, clock=clock)


@pytest.fixture
def message_service(database, thread_service, clock):
    return MessageService(database, thread_service, clock=clock)


@pytest.fixture
def make_llm_client():
    """Build an LLMClient whose HTTP traffic goes to ``handler``."""
    def factory(handler, api_key="test-key"):
        settings = LLMSettings(api_key=api_key, api_url=LLM_URL)
        return LLMClient(settings, httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    return factory


@pytest.fixture
def llm_requests():
    """Payloads the fake LLM endpoint received, in order."""
    return []


@pytest.fixture
def llm_client(make_llm_client, llm_requests):
    """Fake endpoint: streams "Paris is the capital." and titles "Capital of France"."""

    def handler(request):
        payload = json.loads(request.content)
        llm_requests.append(payload)
        if payload.get("stream"):
            return httpx.Response(
                200,
                content=sse_body(["Paris is ", "the capital."]),
                headers={"content-type": "text/event-stream"},
            )
        return httpx.Response(200, json=completion_body("Capital of France"))

    return make_llm_client(handler)
