"""Session state, transcript model and the pure transition function.

Every change to a chat session goes through ``reduce(state, action)``, which
returns a new ``SessionState`` and never mutates its input. The caller keeps a
single slot holding the current state and swaps it on each dispatch.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import DashboardConfigError


class Task(Enum):
    """Analysis task; selects the response shape and how it is merged"""
    DASHBOARD = "Analysis Dashboard"
    EDA = "Data Analysis"
    INSIGHTS = "Generate Insights"


class Role(Enum):
    USER = "user"
    MODEL = "model"


class EntryKind(Enum):
    TEXT = "text"
    CHART = "chart"
    DASHBOARD = "dashboard"
    ERROR = "error"


ChartType = Literal["bar", "line", "pie", "scatter"]

Row = Dict[str, Any]

# Fields each chart type needs in order to be drawn
REQUIRED_KEYS = {
    "pie": (("pieDataKey", "pie_data_key"), ("pieNameKey", "pie_name_key")),
    "scatter": (("xAxisKey", "x_axis_key"), ("yAxisKey", "y_axis_key")),
    "bar": (("xAxisKey", "x_axis_key"), ("dataKeys", "data_keys")),
    "line": (("xAxisKey", "x_axis_key"), ("dataKeys", "data_keys")),
}


def describe_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors into one readable line"""
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        problems.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "; ".join(problems)


class ChartSpec(BaseModel):
    """Rendering-agnostic description of a single chart.

    Field aliases match the camelCase JSON the model is asked to produce.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    chart_type: ChartType = Field(alias="chartType")
    data: Tuple[Row, ...]
    data_keys: Tuple[str, ...] = Field(default=(), alias="dataKeys")
    colors: Tuple[str, ...] = ()
    title: Optional[str] = None
    x_axis_key: Optional[str] = Field(default=None, alias="xAxisKey")
    y_axis_key: Optional[str] = Field(default=None, alias="yAxisKey")
    pie_data_key: Optional[str] = Field(default=None, alias="pieDataKey")
    pie_name_key: Optional[str] = Field(default=None, alias="pieNameKey")

    @field_validator("data_keys", "colors", mode="before")
    @classmethod
    def _stringify_items(cls, value):
        if value is None:
            return ()
        if isinstance(value, (list, tuple)):
            return tuple(str(item) for item in value)
        return value

    @model_validator(mode="after")
    def _check_keys(self):
        missing = [alias for alias, name in REQUIRED_KEYS[self.chart_type] if not getattr(self, name)]
        if missing:
            raise ValueError(f"{self.chart_type} chart is missing {', '.join(missing)}")
        return self

    @classmethod
    def from_dict(cls, payload: Any) -> "ChartSpec":
        """
        Build a chart from the model's camelCase JSON object.

        Raises:
            DashboardConfigError: if the payload does not describe a usable chart
        """
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise DashboardConfigError(
                f"Invalid dashboard configuration: {describe_validation_error(e)}"
            ) from e


@dataclass(frozen=True)
class AnalysisResult:
    """Complete answer of a one-shot query"""
    kind: EntryKind
    content: Any


@dataclass(frozen=True)
class TranscriptEntry:
    role: Role
    kind: EntryKind
    content: Any
    is_loading: bool = False


@dataclass(frozen=True)
class SessionState:
    file: Any = None
    parsed_data: Optional[Tuple[Row, ...]] = None
    raw_data: Optional[str] = None
    user_query: str = ""
    is_loading: bool = False
    error: Optional[str] = None
    chat: Any = None
    transcript: Tuple[TranscriptEntry, ...] = ()

    @property
    def last_entry(self) -> Optional[TranscriptEntry]:
        return self.transcript[-1] if self.transcript else None

    @property
    def has_dataset(self) -> bool:
        return self.chat is not None and self.parsed_data is not None


INITIAL_STATE = SessionState()


# Actions

@dataclass(frozen=True)
class StartLoading:
    pass


@dataclass(frozen=True)
class SetError:
    message: Optional[str]


@dataclass(frozen=True)
class SetQuery:
    text: str


@dataclass(frozen=True)
class SetFile:
    file: Any


@dataclass(frozen=True)
class SetParsedData:
    rows: Tuple[Row, ...]
    raw: str
    chat: Any


@dataclass(frozen=True)
class AppendEntry:
    entry: TranscriptEntry


@dataclass(frozen=True)
class MergeFragment:
    """Concatenate a streamed fragment onto the trailing text entry"""
    fragment: str
    is_loading: bool = True


@dataclass(frozen=True)
class SetLastContent:
    """Replace the trailing entry's content with a complete result"""
    content: Any
    is_loading: bool = False


@dataclass(frozen=True)
class FinishTurn:
    pass


@dataclass(frozen=True)
class FailLast:
    message: str


@dataclass(frozen=True)
class ResetSession:
    keep_file: bool = False


Action = Union[
    StartLoading, SetError, SetQuery, SetFile, SetParsedData, AppendEntry,
    MergeFragment, SetLastContent, FinishTurn, FailLast, ResetSession,
]


def _replace_last(transcript: Tuple[TranscriptEntry, ...], **changes) -> Tuple[TranscriptEntry, ...]:
    return transcript[:-1] + (replace(transcript[-1], **changes),)


def reduce(state: SessionState, action: Action) -> SessionState:
    """Return the state that results from applying ``action`` to ``state``"""

    if isinstance(action, StartLoading):
        return replace(state, is_loading=True, error=None)

    if isinstance(action, SetError):
        return replace(state, is_loading=False, error=action.message)

    if isinstance(action, SetQuery):
        return replace(state, user_query=action.text)

    if isinstance(action, SetFile):
        return replace(
            state,
            file=action.file,
            parsed_data=None,
            raw_data=None,
            chat=None,
            transcript=(),
            error=None,
        )

    if isinstance(action, SetParsedData):
        return replace(
            state,
            parsed_data=tuple(action.rows),
            raw_data=action.raw,
            chat=action.chat,
        )

    if isinstance(action, AppendEntry):
        return replace(state, transcript=state.transcript + (action.entry,))

    if isinstance(action, MergeFragment):
        last = state.last_entry
        if last is None or last.kind is not EntryKind.TEXT:
            return state
        return replace(state, transcript=_replace_last(
            state.transcript,
            content=last.content + action.fragment,
            is_loading=action.is_loading,
        ))

    if isinstance(action, SetLastContent):
        if not state.transcript:
            return state
        return replace(state, transcript=_replace_last(
            state.transcript,
            content=action.content,
            is_loading=action.is_loading,
        ))

    if isinstance(action, FinishTurn):
        transcript = state.transcript
        if transcript and transcript[-1].is_loading:
            transcript = _replace_last(transcript, is_loading=False)
        return replace(state, is_loading=False, transcript=transcript)

    if isinstance(action, FailLast):
        last = state.last_entry
        if last is not None and last.role is Role.MODEL and last.is_loading:
            transcript = _replace_last(
                state.transcript,
                kind=EntryKind.ERROR,
                content=action.message,
                is_loading=False,
            )
        else:
            error_entry = TranscriptEntry(Role.MODEL, EntryKind.ERROR, action.message)
            transcript = state.transcript + (error_entry,)
        return replace(state, is_loading=False, transcript=transcript)

    if isinstance(action, ResetSession):
        if action.keep_file:
            return replace(state, user_query="", is_loading=False, error=None, transcript=())
        return INITIAL_STATE

    return state
