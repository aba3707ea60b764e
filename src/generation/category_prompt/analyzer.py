"""
카테고리 분석기

메시지 → LLM 1회 호출 → 5개 카테고리 키워드(JSON)
재시도 없음. 어떤 실패든 전체 default 추출로 흡수하고 예외를 올리지 않는다.
"""

import json
import re
import time
from typing import Any, Dict, List, Optional, Tuple

import openai

from src.generation.category_prompt.exceptions import ExtractionError
from src.generation.category_prompt.mappings import CATEGORY_KEYS, get_available_keywords
from src.generation.category_prompt.models import (
    EXTRACTION_FALLBACK,
    EXTRACTION_LLM,
    EXTRACTION_SKIPPED,
    CategoryExtraction,
    ExtractionResult,
)
from src.utils.config import settings
from src.utils.logging import get_logger

logger = get_logger(__name__)

HIDDEN_TAG_KEYS = ("LOCATION", "EMOTION", "ACTION", "ATMOSPHERE", "OUTFIT", "POSITION")
_HIDDEN_TAG_PATTERNS = {
    key: re.compile(rf"<!--\s*{key}:\s*(.+?)\s*-->", re.IGNORECASE)
    for key in HIDDEN_TAG_KEYS
}

CHAT_CONTEXT_LIMIT = 5


def parse_hidden_tags(message: str) -> Tuple[str, Dict[str, str]]:
    """
    <!-- LOCATION: 카페 --> 형태의 숨김 태그 추출

    Returns:
        (태그를 제거한 메시지, {태그명 소문자: 값})
    """
    clean = message
    tags: Dict[str, str] = {}

    for key, pattern in _HIDDEN_TAG_PATTERNS.items():
        for match in pattern.finditer(message):
            value = match.group(1).strip()
            if value:
                tags[key.lower()] = value
            clean = clean.replace(match.group(0), "")

    clean = re.sub(r"\s+", " ", clean).strip()
    return clean, tags


def _extract_json_dict(content: Optional[str]) -> Optional[Dict]:
    """LLM 응답에서 JSON dict를 안전하게 추출."""
    if not content:
        return None

    cleaned = content.strip()

    # 코드펜스 제거
    if cleaned.startswith("```"):
        cleaned = re.sub(r"^```(?:json)?", "", cleaned, flags=re.IGNORECASE).strip()
        cleaned = re.sub(r"```$", "", cleaned).strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end < start:
        return None

    candidate = cleaned[start:end + 1]
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        # trailing comma 보정
        fixed = re.sub(r",\s*([}\]])", r"\1", candidate)
        try:
            parsed = json.loads(fixed)
        except json.JSONDecodeError:
            return None

    return parsed if isinstance(parsed, dict) else None


def _format_chat_history(chat_history: List[Dict[str, Any]]) -> str:
    lines = []
    for msg in chat_history[-CHAT_CONTEXT_LIMIT:]:
        if isinstance(msg, dict):
            role = msg.get("role") or "unknown"
            content = (msg.get("content") or "").strip()
        else:
            role, content = "unknown", str(msg).strip()
        if content:
            lines.append(f"{role}: {content}")
    return "\n".join(lines)


def _build_system_prompt() -> str:
    keyword_lines = "\n".join(
        f"- {category}: {', '.join(keywords)}"
        for category, keywords in get_available_keywords().items()
    )
    return f"""
당신은 채팅 메시지를 분석해 이미지 생성용 카테고리를 고르는 전문가입니다.
메시지(와 최근 대화)를 보고 아래 5개 카테고리 각각에 가장 알맞은 한국어 키워드를 하나씩 고르세요.

## 카테고리
1. location_environment: 장소/환경
2. outfit_style: 복장/스타일
3. action_pose: 동작/자세
4. expression_emotion: 표정/감정
5. atmosphere_lighting: 분위기/조명

## 키워드 목록 (가능하면 여기서 고르세요)
{keyword_lines}

## 규칙
- 메시지에서 판단할 수 없는 카테고리는 "default"
- 숨김 태그 정보가 주어지면 메시지 해석보다 우선
- *별표* 안의 내용은 상황 설명이므로 주의 깊게 반영

## 출력 형식
JSON만 출력하세요. 마크다운 블록은 사용하지 마세요.
{{"location_environment": "...", "outfit_style": "...", "action_pose": "...", "expression_emotion": "...", "atmosphere_lighting": "..."}}
""".strip()


class CategoryAnalyzer:
    """
    LLM 기반 카테고리 추출기

    Args:
        client: openai.AsyncOpenAI 호환 클라이언트 (없으면 첫 호출 때 생성)
        model / temperature / max_tokens / timeout: 미지정 시 settings 값
    """

    def __init__(
        self,
        client: Any = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self._client = client
        self.model = model or settings.CATEGORY_PROMPT_MODEL
        self.temperature = settings.CATEGORY_PROMPT_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or settings.CATEGORY_PROMPT_MAX_TOKENS
        self.timeout = timeout or settings.CATEGORY_PROMPT_TIMEOUT
        self.system_prompt = _build_system_prompt()

    def _get_client(self) -> Any:
        if self._client is None:
            if not settings.OPENAI_API_KEY:
                raise ExtractionError("OPENAI_API_KEY가 설정되지 않았습니다.")
            # 재시도는 하지 않는다 (호출당 LLM 요청 1회)
            self._client = openai.AsyncOpenAI(
                api_key=settings.OPENAI_API_KEY,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    def _build_user_prompt(
        self,
        message: str,
        hidden_tags: Dict[str, str],
        chat_history: Optional[List[Dict[str, Any]]],
    ) -> str:
        parts = [f'현재 메시지: "{message}"']
        if hidden_tags:
            parts.append("숨김 태그 정보 (최우선):\n" + json.dumps(hidden_tags, ensure_ascii=False))
        if chat_history:
            history = _format_chat_history(chat_history)
            if history:
                parts.append(f"최근 대화:\n{history}")
        return "\n\n".join(parts)

    async def _request_categories(self, user_prompt: str) -> Dict:
        client = self._get_client()
        response = await client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        if not response.choices:
            raise ExtractionError("LLM 응답에 choices가 없습니다.")

        content = response.choices[0].message.content
        payload = _extract_json_dict(content)
        if payload is None:
            raise ExtractionError(f"JSON 파싱 실패: {(content or '')[:100]}")
        return payload

    async def extract(
        self,
        message: str,
        gender: str = "female",
        chat_history: Optional[List[Dict[str, Any]]] = None,
    ) -> ExtractionResult:
        """
        메시지에서 5개 카테고리 추출

        Args:
            message: 사용자/캐릭터 메시지 (숨김 태그 포함 가능)
            gender: 캐릭터 성별 (로그용)
            chat_history: 최근 대화 [{"role": ..., "content": ...}] (마지막 5개 사용)

        Returns:
            ExtractionResult (method: llm | fallback | skipped)
        """
        start = time.perf_counter()
        clean_message, hidden_tags = parse_hidden_tags(message or "")
        if hidden_tags:
            logger.info(f"🏷️ 숨김 태그 발견: {list(hidden_tags)}")

        if not clean_message and not hidden_tags:
            logger.info("빈 메시지 - LLM 호출 생략, 기본 카테고리 사용")
            return ExtractionResult(
                extraction=CategoryExtraction(),
                method=EXTRACTION_SKIPPED,
                processing_time_ms=(time.perf_counter() - start) * 1000,
            )

        try:
            user_prompt = self._build_user_prompt(clean_message, hidden_tags, chat_history)
            payload = await self._request_categories(user_prompt)
            extraction = CategoryExtraction.from_llm_payload(payload)

            missing = [key for key in CATEGORY_KEYS if key not in payload]
            if missing:
                logger.warning(f"LLM 응답 누락 필드 → default: {missing}")

            elapsed = (time.perf_counter() - start) * 1000
            logger.info(
                f"카테고리 추출 완료 ({elapsed:.0f}ms, gender={gender}): "
                f"{extraction.as_dict()}"
            )
            return ExtractionResult(
                extraction=extraction,
                method=EXTRACTION_LLM,
                processing_time_ms=elapsed,
                hidden_tags=hidden_tags,
            )

        except ExtractionError as e:
            logger.warning(f"카테고리 추출 실패, 기본값 사용: {e}")
            error = str(e)
        except Exception as e:
            logger.error(f"카테고리 추출 LLM 호출 실패: {e}", exc_info=True)
            error = f"{type(e).__name__}: {e}"

        return ExtractionResult(
            extraction=CategoryExtraction(),
            method=EXTRACTION_FALLBACK,
            processing_time_ms=(time.perf_counter() - start) * 1000,
            hidden_tags=hidden_tags,
            error=error,
        )
