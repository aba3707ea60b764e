"""
프롬프트 서비스 로깅 설정

콘솔과 실행 단위 파일(logs/<YYYY-MM-DD>/<YYYYMMDD_HHMMSS>__<user>.log)에
같은 포맷으로 기록한다. 콘솔에서만 레벨명에 색을 입히고, 파일에는 ANSI 코드를 남기지 않는다.
uvicorn access 로그도 같은 실행 파일로 합친다.
"""

from __future__ import annotations

import getpass
import logging
import os
import re
import shutil
import sys
from datetime import date, datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from uvicorn.logging import AccessFormatter

from src.utils.config import PROJECT_ROOT, settings

LINE_FORMAT = "[%(asctime)s]  %(level_label)-7s [%(short_name)s] %(message)s"
ACCESS_FORMAT = '%(levelprefix)s %(asctime)s - "%(request_line)s" %(status_code)s'
ACCESS_DATEFMT = "%y/%m/%d %H:%M:%S"

_ANSI = re.compile(r"\x1b\[[0-9;]*m")
_LEVEL_SHORTCUTS = {"D": "DEBUG", "I": "INFO", "W": "WARNING", "E": "ERROR", "C": "CRITICAL"}

_run_log_file: Optional[Path] = None


def _strip_ansi(value):
    return _ANSI.sub("", value) if isinstance(value, str) else value


class AnsiStripFilter(logging.Filter):
    """파일 핸들러용. 메시지와 문자열 인자에서 색상 코드를 제거한다."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = _strip_ansi(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(_strip_ansi(arg) for arg in record.args)
        return True


class PromptLogFormatter(logging.Formatter):
    """
    [25/11/25 12:11:01,07]  INFO    [service] 메시지

    시간은 centisecond 까지, 모듈명은 logger 이름의 마지막 토큰만 쓴다.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "36",
        logging.INFO: "32",
        logging.WARNING: "33",
        logging.ERROR: "31",
        logging.CRITICAL: "35",
    }

    def __init__(self, colored: bool = False):
        super().__init__(LINE_FORMAT)
        self.colored = colored

    def formatTime(self, record, datefmt=None):
        stamp = datetime.fromtimestamp(record.created).strftime("%y/%m/%d %H:%M:%S")
        return f"{stamp},{int(record.msecs) // 10:02d}"

    def format(self, record: logging.LogRecord) -> str:
        record.short_name = record.name.split(".")[-1]
        code = self.LEVEL_COLORS.get(record.levelno)
        if self.colored and code:
            record.level_label = f"\033[{code}m{record.levelname}\033[0m"
        else:
            record.level_label = record.levelname
        return super().format(record)


def resolve_level(level: Optional[str] = None) -> int:
    """'debug', 'D', 'WARNING' 같은 값을 logging 레벨 숫자로. 모르는 값은 INFO."""
    name = (level or settings.LOG_LEVEL or "INFO").strip().upper()
    name = _LEVEL_SHORTCUTS.get(name, name)
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def prune_log_folders(base: Path, keep_days: int, today: Optional[date] = None) -> list[Path]:
    """keep_days 보다 오래된 날짜 폴더(YYYY-MM-DD)를 지우고 지운 경로를 돌려준다."""
    if not base.is_dir():
        return []
    oldest_kept = (today or date.today()) - timedelta(days=keep_days)
    removed = []
    for folder in sorted(base.iterdir()):
        if not folder.is_dir():
            continue
        try:
            folder_day = datetime.strptime(folder.name, "%Y-%m-%d").date()
        except ValueError:
            continue
        if folder_day <= oldest_kept:
            shutil.rmtree(folder, ignore_errors=True)
            removed.append(folder)
    return removed


def _run_file_path(base: Path) -> Path:
    now = datetime.now()
    user = os.environ.get("LOG_RUN_USER") or getpass.getuser() or "unknown"
    folder = base / now.strftime("%Y-%m-%d")
    folder.mkdir(parents=True, exist_ok=True)
    return folder / f"{now:%Y%m%d_%H%M%S}__{user}.log"


def _file_handler(path: Path, formatter: logging.Formatter, max_bytes: int, backup_count: int):
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
    handler.setFormatter(formatter)
    handler.addFilter(AnsiStripFilter())
    return handler


def _console_handler(formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_dir: Optional[str] = None,
    level: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 20,
    use_color: bool = True,
) -> Optional[Path]:
    """루트 로거와 uvicorn.access 로거를 구성하고 실행 로그 파일 경로를 반환한다. 두 번째 호출부터는 무시."""
    global _run_log_file
    if _run_log_file is not None:
        return _run_log_file

    base = Path(log_dir or settings.LOG_DIR or PROJECT_ROOT / "logs")
    base.mkdir(parents=True, exist_ok=True)
    prune_log_folders(base, settings.LOG_RETENTION_DAYS)
    _run_log_file = _run_file_path(base)

    colored = use_color and sys.stdout.isatty()

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(resolve_level(level))
    root.addHandler(_console_handler(PromptLogFormatter(colored=colored)))
    root.addHandler(_file_handler(_run_log_file, PromptLogFormatter(), max_bytes, backup_count))

    access = logging.getLogger("uvicorn.access")
    access.handlers.clear()
    access.propagate = False
    access.addHandler(_console_handler(AccessFormatter(ACCESS_FORMAT, datefmt=ACCESS_DATEFMT, use_colors=colored)))
    access.addHandler(_file_handler(
        _run_log_file,
        AccessFormatter(ACCESS_FORMAT, datefmt=ACCESS_DATEFMT, use_colors=False),
        max_bytes,
        backup_count,
    ))

    logging.getLogger(__name__).info(f"로그 파일: {_run_log_file}")
    return _run_log_file


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
