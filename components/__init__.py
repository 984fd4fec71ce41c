"""UI Components package for data-chat"""

from .sidebar import render_sidebar
from .chat_interface import render_transcript, live_entry_renderer, render_welcome_message
from .data_preview import render_data_preview, render_suggestion_chips

__all__ = [
    'render_sidebar',
    'render_transcript',
    'live_entry_renderer',
    'render_welcome_message',
    'render_data_preview',
    'render_suggestion_chips'
]
