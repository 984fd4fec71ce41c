"""Utils package for data-chat"""

from .logger import AppLogger, get_logger
from .async_helpers import run_async_with_timeout
from .security import check_api_key, mask_api_key, sanitize_filename
from .file_parser import DataFile, ParsedFile, DataFileParser
from .chart_handler import ChartHandler

__all__ = [
    'AppLogger',
    'get_logger',
    'run_async_with_timeout',
    'check_api_key',
    'mask_api_key',
    'sanitize_filename',
    'DataFile',
    'ParsedFile',
    'DataFileParser',
    'ChartHandler'
]
