"""Turn orchestration: dataset ingestion and query submission.

The orchestrator owns the single mutable slot holding the current
``SessionState``. Collaborators are awaited here, their failures are turned
into taxonomy errors, and every change is applied through ``reduce``.

Each session epoch carries a generation number. Starting a new ingestion or
resetting the session bumps it, and a turn that resumes after an await with a
stale generation stops without touching state.
"""

from typing import AsyncIterator, Callable, List, Optional, Protocol

from config import Settings, get_settings
from utils import get_logger
from .errors import ParseError, SessionError, ValidationError, friendly_error_message
from .state import (
    INITIAL_STATE,
    Action,
    AnalysisResult,
    AppendEntry,
    EntryKind,
    FailLast,
    FinishTurn,
    MergeFragment,
    ResetSession,
    Role,
    SessionState,
    SetError,
    SetFile,
    SetLastContent,
    SetParsedData,
    SetQuery,
    StartLoading,
    Task,
    TranscriptEntry,
    reduce,
)

NO_DATASET_MESSAGE = "Please upload a valid data file first."
EMPTY_QUERY_MESSAGE = "Please enter a message."
INTERRUPTED_MESSAGE = "The response was interrupted before it finished. Please try again."


class ChatSession(Protocol):
    async def query(self, query: str, task: Task) -> AnalysisResult: ...

    def query_stream(self, query: str, task: Task) -> AsyncIterator[str]: ...


class ChatSessionFactory(Protocol):
    def create(self, raw_data: str) -> ChatSession: ...


class FileParser(Protocol):
    async def parse(self, data_file): ...


StateListener = Callable[[SessionState], None]


class SessionOrchestrator:
    """Drive one chat session over one dataset at a time"""

    def __init__(
        self,
        parser: FileParser,
        chat_factory: ChatSessionFactory,
        settings: Optional[Settings] = None,
        logger=None
    ):
        self.parser = parser
        self.chat_factory = chat_factory
        self.settings = settings or get_settings()
        self.logger = logger or get_logger()
        self._state = INITIAL_STATE
        self._generation = 0
        self._listeners: List[StateListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a render callback; returns a function that removes it"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> SessionState:
        self._state = reduce(self._state, action)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def new_chat(self):
        """Clear the conversation but keep the dataset and chat session"""
        self._next_generation()
        self.dispatch(ResetSession(keep_file=True))
        self.logger.log("info", "New chat started")

    def reset(self):
        """Drop the dataset, chat session and conversation"""
        self._next_generation()
        self.dispatch(ResetSession(keep_file=False))
        self.logger.log("info", "Session reset")

    def _fail_ingestion(self, error: SessionError):
        self.dispatch(ResetSession(keep_file=False))
        self.dispatch(SetError(str(error)))

    async def ingest_file(self, data_file) -> SessionState:
        """Parse an uploaded dataset and bind a fresh chat session to it"""
        generation = self._next_generation()

        if data_file is None:
            self.dispatch(ResetSession(keep_file=False))
            self.logger.log("info", "File removed")
            return self._state

        max_bytes = self.settings.max_file_size_bytes
        if data_file.size > max_bytes:
            error = ValidationError(
                f"File is too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
            )
            self.logger.log_file_operation(
                "upload_failed", data_file.name, data_file.size, success=False, error=str(error)
            )
            self._fail_ingestion(error)
            return self._state

        try:
            self.dispatch(ResetSession(keep_file=True))
            self.dispatch(StartLoading())
            self.dispatch(SetFile(data_file))

            parsed = await self.parser.parse(data_file)
            if not self._is_current(generation):
                self.logger.log("warning", f"Discarding superseded parse of {data_file.name}")
                return self._state
            chat = self.chat_factory.create(parsed.raw)

            self.dispatch(SetParsedData(parsed.rows, parsed.raw, chat))
            self.dispatch(FinishTurn())
        except Exception as e:
            if not self._is_current(generation):
                return self._state
            error = e if isinstance(e, SessionError) else ParseError(str(e))
            self.logger.log_file_operation(
                "parse_failed", data_file.name, data_file.size, success=False, error=str(error)
            )
            self._fail_ingestion(error)
            return self._state
        except BaseException:
            # Cancellation or a script stop must not leave the session loading
            if self._is_current(generation) and self._state.is_loading:
                self.logger.log_file_operation(
                    "parse_interrupted", data_file.name, data_file.size, success=False
                )
                self._fail_ingestion(
                    ParseError(f"Processing {data_file.name} was interrupted. Please upload it again.")
                )
            raise

        self.logger.log_file_operation("parse", data_file.name, data_file.size)
        return self._state

    async def submit_query(self, query: str, task: Optional[Task] = None) -> SessionState:
        """Run one query turn and merge the answer into the transcript"""
        state = self._state

        if state.is_loading:
            self.logger.log("warning", "Query ignored while another turn is in progress")
            return self._state

        if not state.has_dataset:
            self.dispatch(SetError(NO_DATASET_MESSAGE))
            return self._state

        if not query:
            self.dispatch(SetError(EMPTY_QUERY_MESSAGE))
            return self._state

        task = task or Task.INSIGHTS
        chat = state.chat
        generation = self._generation

        try:
            self.dispatch(StartLoading())
            self.dispatch(SetQuery(""))
            self.dispatch(AppendEntry(TranscriptEntry(Role.USER, EntryKind.TEXT, query)))

            if task is Task.DASHBOARD:
                await self._run_dashboard(chat, query, task, generation)
            else:
                await self._run_stream(chat, query, task, generation)
        except Exception as e:
            if not self._is_current(generation):
                self.logger.log("warning", f"Failure of superseded turn ignored: {e}")
                return self._state
            self.logger.log("error", f"Query failed ({task.value}): {e}")
            self.logger.log_turn(task.value, query, "failed")
            self.dispatch(FailLast(friendly_error_message(str(e))))
        except BaseException:
            if self._is_current(generation) and self._state.is_loading:
                self.logger.log("warning", f"Query interrupted ({task.value})")
                self.logger.log_turn(task.value, query, "interrupted")
                self.dispatch(FailLast(INTERRUPTED_MESSAGE))
            raise

        return self._state

    async def _run_dashboard(self, chat: ChatSession, query: str, task: Task, generation: int):
        self.dispatch(AppendEntry(TranscriptEntry(Role.MODEL, EntryKind.DASHBOARD, (), is_loading=True)))

        result = await chat.query(query, task)
        if not self._is_current(generation):
            self.logger.log_turn(task.value, query, "superseded")
            return

        charts = tuple(result.content)
        self.dispatch(SetLastContent(charts, is_loading=False))
        self.dispatch(FinishTurn())
        self.logger.log_turn(task.value, query, "completed", charts=len(charts))

    async def _run_stream(self, chat: ChatSession, query: str, task: Task, generation: int):
        self.dispatch(AppendEntry(TranscriptEntry(Role.MODEL, EntryKind.TEXT, "", is_loading=True)))

        stream = chat.query_stream(query, task)
        fragments = 0
        try:
            async for fragment in stream:
                if not self._is_current(generation):
                    self.logger.log_turn(task.value, query, "superseded", fragments=fragments)
                    return
                self.dispatch(MergeFragment(fragment, is_loading=True))
                fragments += 1
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        if not self._is_current(generation):
            self.logger.log_turn(task.value, query, "superseded", fragments=fragments)
            return

        self.dispatch(FinishTurn())
        self.logger.log_turn(task.value, query, "completed", fragments=fragments)
