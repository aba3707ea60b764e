from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def _locate_root(anchor: Path) -> Path:
    """anchor 부터 상위로 올라가며 src/ 를 포함한 첫 디렉토리를 반환"""
    for candidate in (anchor, *anchor.parents):
        if (candidate / "src").is_dir():
            return candidate
    raise RuntimeError(f"src/ 를 포함한 프로젝트 루트를 찾지 못했습니다: {anchor}")


PROJECT_ROOT: Path = _locate_root(Path(__file__).resolve().parent)
ENV_FILE: Path = PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    OPENAI_API_KEY: Optional[str] = None

    # 카테고리 추출 LLM
    CATEGORY_PROMPT_MODEL: str = "gpt-4o-mini"
    CATEGORY_PROMPT_TEMPERATURE: float = 0.3
    CATEGORY_PROMPT_MAX_TOKENS: int = 500
    CATEGORY_PROMPT_TIMEOUT: float = 30.0

    # 헬스체크: 최근 N건 기준 성공률
    HEALTH_WINDOW_SIZE: int = 100

    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None
    LOG_RETENTION_DAYS: int = 14

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
