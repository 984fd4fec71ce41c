"""OpenAI-backed chat sessions bound to an uploaded dataset"""

import time
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, Field, ValidationError, model_validator

from config import Settings, get_settings, get_prompt_manager
from utils import get_logger
from .errors import DashboardConfigError, TransportError
from .state import AnalysisResult, ChartSpec, EntryKind, Task, describe_validation_error

SAFETY_BLOCK_MESSAGE = "Response blocked by the provider's safety filter"


class DashboardPayload(BaseModel):
    """JSON answer of a dashboard request"""
    charts: List[ChartSpec] = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_list(cls, value):
        if isinstance(value, list):
            return {"charts": value}
        return value


def parse_dashboard(payload: str) -> List[ChartSpec]:
    """
    Turn the model's JSON answer into chart specs.

    Accepts either {"charts": [...]} or a bare list of chart objects.

    Raises:
        DashboardConfigError: if the JSON is malformed or holds no usable charts
    """
    try:
        return DashboardPayload.model_validate_json(payload).charts
    except ValidationError as e:
        raise DashboardConfigError(
            f"Invalid dashboard configuration: {describe_validation_error(e)}"
        ) from e


class OpenAIChatSession:
    """Stateful conversation about one dataset"""

    def __init__(
        self,
        raw_data: str,
        key_provider: Optional[Callable[[], Optional[str]]] = None,
        settings: Optional[Settings] = None,
        client_factory: Optional[Callable[[], Any]] = None
    ):
        self.settings = settings or get_settings()
        self.logger = get_logger()
        self.prompt_manager = get_prompt_manager()
        self.key_provider = key_provider
        self._client_factory = client_factory
        self.system_prompt = self.prompt_manager.get_formatted_prompt(
            raw_data,
            use_custom=self.settings.use_custom_prompt,
            max_chars=self.settings.max_context_chars
        )
        self.history: List[Dict[str, str]] = []

    def _new_client(self):
        if self._client_factory is not None:
            return self._client_factory()

        # Read per request; the key may change after the session is created
        api_key = (self.key_provider() if self.key_provider else None) or self.settings.openai_api_key
        if not api_key:
            raise TransportError("OpenAI API key not configured. Set OPENAI_API_KEY in your environment.")
        return AsyncOpenAI(api_key=api_key)

    def prepare_messages(self, query: str, task: Task) -> List[Dict[str, str]]:
        """System prompt, recent history and the task-wrapped query"""
        messages = [{"role": "system", "content": self.system_prompt}]

        if self.settings.context_window > 0:
            messages.extend(self.history[-self.settings.context_window:])

        messages.append({
            "role": "user",
            "content": self.prompt_manager.get_task_prompt(task, query)
        })
        return messages

    def _remember(self, query: str, reply: str):
        self.history.append({"role": "user", "content": query})
        self.history.append({"role": "assistant", "content": reply})

    async def query(self, query: str, task: Task) -> AnalysisResult:
        """One-shot request returning a full dashboard"""
        messages = self.prepare_messages(query, task)
        start_time = time.time()

        try:
            async with self._new_client() as client:
                response = await client.chat.completions.create(
                    model=self.settings.openai_model,
                    messages=messages,
                    temperature=self.settings.openai_temperature,
                    max_tokens=self.settings.openai_max_tokens,
                    response_format={"type": "json_object"}
                )
        except OpenAIError as e:
            self._log_call(task, messages, start_time, error=str(e))
            raise TransportError(str(e)) from e

        choice = response.choices[0]
        if choice.finish_reason == "content_filter":
            self._log_call(task, messages, start_time, error=SAFETY_BLOCK_MESSAGE)
            raise TransportError(SAFETY_BLOCK_MESSAGE)

        self._log_call(task, messages, start_time)

        content = choice.message.content or ""
        charts = parse_dashboard(content)
        self._remember(query, content)

        return AnalysisResult(kind=EntryKind.DASHBOARD, content=charts)

    async def query_stream(self, query: str, task: Task) -> AsyncIterator[str]:
        """Streaming request yielding text fragments in arrival order"""
        messages = self.prepare_messages(query, task)
        start_time = time.time()
        parts = []

        try:
            async with self._new_client() as client:
                stream = await client.chat.completions.create(
                    model=self.settings.openai_model,
                    messages=messages,
                    temperature=self.settings.openai_temperature,
                    max_tokens=self.settings.openai_max_tokens,
                    stream=True
                )
                async for chunk in stream:
                    if not chunk.choices:
                        continue
                    choice = chunk.choices[0]
                    if choice.finish_reason == "content_filter":
                        self._log_call(task, messages, start_time, streamed=True, error=SAFETY_BLOCK_MESSAGE)
                        raise TransportError(SAFETY_BLOCK_MESSAGE)
                    fragment = choice.delta.content
                    if fragment:
                        parts.append(fragment)
                        yield fragment
        except OpenAIError as e:
            self._log_call(task, messages, start_time, streamed=True, error=str(e))
            raise TransportError(str(e)) from e

        self._log_call(task, messages, start_time, streamed=True)
        self._remember(query, "".join(parts))

    def _log_call(
        self,
        task: Task,
        messages: List[Dict[str, str]],
        start_time: float,
        streamed: bool = False,
        error: Optional[str] = None
    ):
        self.logger.log_openai_call(
            task=task.value,
            model=self.settings.openai_model,
            messages_count=len(messages),
            response_time_ms=(time.time() - start_time) * 1000,
            streamed=streamed,
            success=error is None,
            error=error
        )


class OpenAIChatSessionFactory:
    """Creates one chat session per successfully parsed dataset.

    Sessions read ``api_key`` back from the factory on every request.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        settings: Optional[Settings] = None,
        client_factory: Optional[Callable[[], Any]] = None
    ):
        self.api_key = api_key
        self.settings = settings
        self.client_factory = client_factory

    def current_api_key(self) -> Optional[str]:
        return self.api_key

    def create(self, raw_data: str) -> OpenAIChatSession:
        return OpenAIChatSession(
            raw_data,
            key_provider=self.current_api_key,
            settings=self.settings,
            client_factory=self.client_factory
        )
