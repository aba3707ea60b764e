import asyncio
import json
from types import SimpleNamespace

import pytest

from src.generation.category_prompt import CategoryAnalyzer, CategoryPromptService, ConversionStats


class FakeCompletions:
    """openai.AsyncOpenAI().chat.completions 대역"""

    def __init__(self, responder):
        self._responder = responder
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        # 배치 테스트에서 코루틴이 서로 끼어들 수 있게 한 번 양보
        await asyncio.sleep(0)
        content = self._responder(kwargs)
        if isinstance(content, BaseException):
            raise content
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
        )


class FakeAsyncOpenAI:
    def __init__(self, responder):
        self.completions = FakeCompletions(responder)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self):
        return self.completions.calls


def _responder_for(content=None, error=None):
    if callable(content):
        return content

    def respond(_kwargs):
        if error is not None:
            return error
        if isinstance(content, dict):
            return json.dumps(content, ensure_ascii=False)
        return content

    return respond


@pytest.fixture
def fake_client():
    """
    fake_client(content=dict|str|callable, error=Exception)
    callable 은 요청 kwargs 를 받아 응답 문자열이나 예외 객체를 돌려준다.
    """
    def factory(content=None, error=None):
        return FakeAsyncOpenAI(_responder_for(content, error))
    return factory


@pytest.fixture
def make_service(fake_client):
    def factory(content=None, error=None, window_size=100, **kwargs):
        client = fake_client(content, error)
        service = CategoryPromptService(
            analyzer=CategoryAnalyzer(client=client, model="test-model"),
            stats=ConversionStats(window_size=window_size),
            **kwargs,
        )
        service.client = client
        return service
    return factory


@pytest.fixture
def cafe_categories():
    return {
        "location_environment": "카페에서",
        "outfit_style": "캐주얼",
        "action_pose": "앉아있는",
        "expression_emotion": "행복한",
        "atmosphere_lighting": "따뜻한",
    }


@pytest.fixture
def default_categories():
    return {
        "location_environment": "default",
        "outfit_style": "default",
        "action_pose": "default",
        "expression_emotion": "default",
        "atmosphere_lighting": "default",
    }
