from types import SimpleNamespace

import pytest


def make_chunk(text):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


class FakeStream:
    def __init__(self, items):
        self._items = list(items)
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._items:
            raise StopAsyncIteration
        item = self._items.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self):
        self.closed = True


class FakeCompletions:
    def __init__(self, stream=None, error=None):
        self.stream = stream
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.stream


class FakeClient:
    def __init__(self, items=(), error=None):
        self.stream = FakeStream(items)
        self.completions = FakeCompletions(self.stream, error)
        self.chat = SimpleNamespace(completions=self.completions)
        self.closed = False

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_client():
    def _make(fragments=(), error=None, raw=None):
        items = raw if raw is not None else [make_chunk(f) for f in fragments]
        return FakeClient(items, error=error)

    return _make
