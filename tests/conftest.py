"""Shared fixtures and test doubles for the session engine"""

import asyncio

import pytest

from config import Settings
from core import AnalysisResult, ChartSpec, EntryKind, SessionOrchestrator
from utils import AppLogger, DataFile, ParsedFile


class FakeParser:
    """Returns a fixed ParsedFile, or raises the configured error"""

    def __init__(self, rows=None, raw="a,b\n1,2\n", error=None, delay=0):
        self.rows = rows if rows is not None else ({"a": 1, "b": 2},)
        self.raw = raw
        self.error = error
        self.delay = delay
        self.calls = []

    async def parse(self, data_file):
        self.calls.append(data_file)
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return ParsedFile(rows=tuple(self.rows), raw=self.raw)


class FakeChat:
    """Chat double yielding scripted fragments, results or failures"""

    def __init__(self, fragments=(), result=None, error=None, fail_after=None, on_fragment=None, delay=0):
        self.fragments = list(fragments)
        self.result = result
        self.error = error
        self.fail_after = fail_after
        self.on_fragment = on_fragment
        self.delay = delay
        self.queries = []
        self.closed = False

    async def query(self, query, task):
        self.queries.append((query, task))
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result

    async def query_stream(self, query, task):
        self.queries.append((query, task))
        try:
            for index, fragment in enumerate(self.fragments):
                if self.fail_after is not None and index == self.fail_after:
                    raise self.error
                await asyncio.sleep(self.delay)
                yield fragment
                if self.on_fragment is not None:
                    self.on_fragment(index)
            if self.error is not None and self.fail_after is None:
                raise self.error
        finally:
            self.closed = True


class FakeChatFactory:
    def __init__(self, chat=None):
        self.chat = chat or FakeChat()
        self.created_with = []

    def create(self, raw_data):
        self.created_with.append(raw_data)
        return self.chat


def make_chart(chart_type="bar", title="Sales"):
    return ChartSpec(
        chart_type=chart_type,
        data=({"month": "Jan", "sales": 10},),
        data_keys=("sales",),
        colors=("#22d3ee",),
        title=title,
        x_axis_key="month",
    )


def dashboard_result(count=2):
    return AnalysisResult(kind=EntryKind.DASHBOARD, content=[make_chart(title=f"Chart {i}") for i in range(count)])


@pytest.fixture
def settings(tmp_path):
    return Settings(log_dir=tmp_path / "logs", max_file_size_mb=10)


@pytest.fixture
def logger(tmp_path):
    return AppLogger(name="data_chat_test", log_dir=str(tmp_path / "logs"))


@pytest.fixture
def data_file():
    content = b"a,b\n1,2\n"
    return DataFile(name="sales.csv", content=content, size=len(content))


@pytest.fixture
def make_orchestrator(settings, logger):
    def factory(parser=None, chat=None):
        return SessionOrchestrator(
            parser=parser or FakeParser(),
            chat_factory=FakeChatFactory(chat),
            settings=settings,
            logger=logger,
        )
    return factory


@pytest.fixture
def ready_orchestrator(make_orchestrator, data_file):
    """Orchestrator with a dataset already ingested"""
    def factory(chat):
        orchestrator = make_orchestrator(chat=chat)
        asyncio.run(orchestrator.ingest_file(data_file))
        return orchestrator
    return factory

