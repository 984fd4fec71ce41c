"""Configuration package for data-chat"""

from .settings import Settings, get_settings
from .prompt_manager import PromptManager, get_prompt_manager

__all__ = ['Settings', 'get_settings', 'PromptManager', 'get_prompt_manager']
