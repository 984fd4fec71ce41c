"""Session management with secure API key handling"""

import streamlit as st
from typing import Dict, Any, Optional
from datetime import datetime
from config import get_settings
from utils import get_logger, check_api_key, DataFileParser
from .chat_session import OpenAIChatSessionFactory
from .orchestrator import SessionOrchestrator
from .state import SessionState
import hashlib
import uuid


class SessionManager:
    """Bind one SessionOrchestrator to each Streamlit browser session"""

    def __init__(self):
        self.settings = get_settings()
        self.logger = get_logger()
        self._ensure_session_id()
        self._ensure_orchestrator()

    def _ensure_session_id(self):
        """Ensure each session has a unique ID for isolation"""
        if 'session_id' not in st.session_state:
            st.session_state.session_id = str(uuid.uuid4())
            self.logger.log("info", f"New session created: {st.session_state.session_id[:8]}...")

    def _ensure_orchestrator(self):
        if 'orchestrator' not in st.session_state:
            st.session_state.orchestrator = SessionOrchestrator(
                parser=DataFileParser(),
                chat_factory=OpenAIChatSessionFactory(self.get_api_key(), self.settings),
                settings=self.settings,
                logger=self.logger
            )

    @property
    def orchestrator(self) -> SessionOrchestrator:
        return st.session_state.orchestrator

    @property
    def state(self) -> SessionState:
        return self.orchestrator.state

    def get_api_key(self) -> Optional[str]:
        """Session key first, then the environment"""
        # SECURITY: Only from session state or environment, never from disk
        return st.session_state.get('openai_api_key') or self.settings.openai_api_key

    def set_api_key(self, api_key: str) -> bool:
        """Securely set API key for this session only"""
        is_valid, _ = check_api_key(api_key)
        if is_valid:
            api_key = api_key.strip()
            st.session_state['openai_api_key'] = api_key
            self.orchestrator.chat_factory.api_key = api_key
            # Log that key was set (but not the key itself)
            key_hash = hashlib.sha256(api_key.encode()).hexdigest()[:8]
            self.logger.log("info", f"API key set for session (hash: {key_hash})")
            return True
        return False

    def clear_api_key(self):
        """Clear API key from session"""
        if 'openai_api_key' in st.session_state:
            del st.session_state['openai_api_key']
            self.orchestrator.chat_factory.api_key = self.settings.openai_api_key
            self.logger.log("info", "API key cleared from session")

    def is_authenticated(self) -> bool:
        """Check if a usable API key is available"""
        is_valid, _ = check_api_key(self.get_api_key())
        return is_valid

    def get_session_info(self) -> Dict[str, Any]:
        """Get session information (excluding sensitive data)"""
        state = self.state
        return {
            'session_id': st.session_state.get('session_id', 'unknown')[:8],
            'authenticated': self.is_authenticated(),
            'file': state.file.name if state.file is not None else None,
            'rows': len(state.parsed_data) if state.parsed_data is not None else 0,
            'transcript_entries': len(state.transcript),
            'generation': self.orchestrator.generation,
            'timestamp': datetime.now().isoformat()
        }
