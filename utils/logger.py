"""Logging configuration for data-chat"""

import logging
import json
import sys
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional
from logging.handlers import RotatingFileHandler


class AppLogger:
    """Centralized logging system with rotating file handlers and a UI buffer"""

    def __init__(
        self,
        name: str = "data_chat",
        log_dir: str = "logs",
        app_log_file: str = "app.log",
        model_log_file: str = "model_calls.log",
        log_level: str = "INFO",
        max_bytes: int = 10_485_760,  # 10MB
        backup_count: int = 5
    ):
        self.name = name
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.app_log_file = app_log_file
        self.model_log_file = model_log_file

        # Main app logger
        self.logger = self._setup_logger(
            f"{name}.app",
            self.log_dir / app_log_file,
            log_level,
            max_bytes,
            backup_count
        )

        # Model calls logger (separate for request/latency tracking)
        self.model_logger = self._setup_logger(
            f"{name}.model",
            self.log_dir / model_log_file,
            log_level,
            max_bytes,
            backup_count,
            detailed=True
        )

        # Store recent logs for UI display
        self.recent_logs = []
        self.max_recent = 100

    def _setup_logger(
        self,
        logger_name: str,
        log_file: Path,
        level: str,
        max_bytes: int,
        backup_count: int,
        detailed: bool = False
    ) -> logging.Logger:
        """Setup individual logger with handlers"""

        logger = logging.getLogger(logger_name)
        logger.setLevel(getattr(logging, level.upper()))

        # Clear existing handlers
        logger.handlers = []

        # File handler with rotation
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        )

        if detailed:
            formatter = logging.Formatter(
                '%(asctime)s | %(levelname)-8s | %(funcName)-20s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
        else:
            formatter = logging.Formatter(
                '%(asctime)s | %(levelname)-8s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )

        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        # Console handler for development
        if sys.stdout.isatty():
            console_handler = logging.StreamHandler(sys.stdout)
            console_formatter = logging.Formatter(
                '%(levelname)-8s | %(message)s'
            )
            console_handler.setFormatter(console_formatter)
            console_handler.setLevel(logging.DEBUG)
            logger.addHandler(console_handler)

        return logger

    def log(
        self,
        level: str,
        message: str,
        extra: Optional[Dict[str, Any]] = None
    ):
        """General logging method"""
        log_method = getattr(self.logger, level.lower())

        if extra:
            message = f"{message} | {json.dumps(extra, default=str)}"

        log_method(message)

        self._add_recent(level.upper(), message)

    def log_file_operation(
        self,
        operation: str,
        filename: str,
        size_bytes: Optional[int] = None,
        success: bool = True,
        error: Optional[str] = None
    ):
        """Log file upload/processing operations"""

        log_data = {
            "operation": operation,
            "filename": filename,
            "timestamp": datetime.now().isoformat()
        }

        if size_bytes:
            log_data["size_kb"] = round(size_bytes / 1024, 2)

        if not success and error:
            log_data["error"] = error

        level = "info" if success else "error"
        self.log(level, f"File {operation}: {filename}", log_data)

    def log_openai_call(
        self,
        task: str,
        model: str,
        messages_count: int,
        response_time_ms: float,
        streamed: bool = False,
        success: bool = True,
        error: Optional[str] = None
    ):
        """Log OpenAI API calls to the model log"""

        log_data = {
            "task": task,
            "model": model,
            "messages": messages_count,
            "streamed": streamed,
            "response_ms": round(response_time_ms, 1),
            "timestamp": datetime.now().isoformat()
        }

        if not success and error:
            log_data["error"] = error

        if success:
            self.model_logger.info(f"OpenAI call to {model} | {json.dumps(log_data, default=str)}")
        else:
            self.model_logger.error(f"OpenAI call to {model} | {json.dumps(log_data, default=str)}")

        self._add_recent("MODEL", json.dumps(log_data, default=str))

    def log_turn(
        self,
        task: str,
        query: str,
        outcome: str,
        fragments: Optional[int] = None,
        charts: Optional[int] = None
    ):
        """Log the outcome of a query turn"""

        log_data = {"task": task, "outcome": outcome}
        if fragments is not None:
            log_data["fragments"] = fragments
        if charts is not None:
            log_data["charts"] = charts

        level = "info" if outcome == "completed" else "warning"
        self.log(level, f"Turn {outcome}: {query[:50]}", log_data)

    def _add_recent(self, level: str, message: str):
        """Add to recent logs buffer"""
        entry = {
            "timestamp": datetime.now().strftime("%H:%M:%S"),
            "level": level,
            "message": message[:200]  # Truncate for display
        }

        self.recent_logs.append(entry)
        if len(self.recent_logs) > self.max_recent:
            self.recent_logs.pop(0)

    def get_recent_logs(
        self,
        count: int = 20,
        level_filter: Optional[str] = None
    ) -> list:
        """Get recent log entries for UI display"""

        logs = self.recent_logs[-count:]

        if level_filter:
            logs = [entry for entry in logs if entry["level"] == level_filter.upper()]

        return logs

    def clear_recent(self):
        """Clear recent logs buffer"""
        self.recent_logs = []


# Global logger instance
_logger = None


def get_logger() -> AppLogger:
    """Get or create the global logger instance"""
    global _logger

    if _logger is None:
        from config import get_settings

        settings = get_settings()
        _logger = AppLogger(
            name="data_chat",
            log_dir=str(settings.log_dir),
            log_level=settings.log_level,
            max_bytes=settings.log_max_bytes,
            backup_count=settings.log_backup_count
        )

    return _logger
