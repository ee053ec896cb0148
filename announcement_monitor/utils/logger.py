import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger


def safe_log_text(text):
    """Escape loguru formatting braces and color tags, keep [] intact"""
    if not isinstance(text, str):
        text = str(text)
    text = text.replace('{', '{{').replace('}', '}}')
    # HTML excerpts would otherwise be parsed as color markup
    text = text.replace('<', r'\<')
    return text


def format_with_exchange(record):
    log_data = ""
    if exchange := record['extra'].get('exchange', ''):
        log_data = f"{safe_log_text(exchange)} "

    log_data += safe_log_text(record["message"])

    return f"<green>{record['time']:HH:mm:ss}</green> | <level>{record['level']: <7}</level> | {log_data}\n"


def format_file_record(record):
    component = record['extra'].get('exchange') or record['extra'].get('component') or 'app'
    return (
        f"{record['time']:YYYY-MM-DD HH:mm:ss} | {record['level']} | {safe_log_text(component)} | "
        f"{safe_log_text(record['message'])}\n"
    )


def setup_logging(level: str = "INFO", log_dir: Optional[Union[str, Path]] = None):
    """Configure structured logging; file sinks are only added when log_dir is given"""
    level = level.upper()

    # Remove default handler
    logger.remove()

    # Console handler
    logger.add(
        sys.stdout,
        format=format_with_exchange,
        level=level
    )

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # File handler - DEBUG and above
        logger.add(
            log_path / "monitor.log",
            format=format_file_record,
            level="DEBUG",
            rotation="10 MB",
            retention="7 days",
            compression="zip"
        )

        # Error file handler
        logger.add(
            log_path / "errors.log",
            format=format_file_record,
            level="ERROR",
            rotation="5 MB",
            retention="30 days"
        )

    logger.configure(extra={"component": "app"})
