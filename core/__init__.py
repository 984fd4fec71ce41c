"""Core session engine for data-chat"""

from .errors import (
    SessionError,
    ValidationError,
    ParseError,
    TransportError,
    DashboardConfigError,
    ErrorCategory,
    classify_error,
    friendly_error_message
)
from .state import (
    Task,
    Role,
    EntryKind,
    ChartSpec,
    AnalysisResult,
    TranscriptEntry,
    SessionState,
    INITIAL_STATE,
    reduce
)
from .orchestrator import SessionOrchestrator
from .chat_session import OpenAIChatSession, OpenAIChatSessionFactory

__all__ = [
    'SessionError',
    'ValidationError',
    'ParseError',
    'TransportError',
    'DashboardConfigError',
    'ErrorCategory',
    'classify_error',
    'friendly_error_message',
    'Task',
    'Role',
    'EntryKind',
    'ChartSpec',
    'AnalysisResult',
    'TranscriptEntry',
    'SessionState',
    'INITIAL_STATE',
    'reduce',
    'SessionOrchestrator',
    'OpenAIChatSession',
    'OpenAIChatSessionFactory'
]
