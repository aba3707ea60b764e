"""
카테고리 기반 이미지 프롬프트 생성 모듈

채팅 메시지 → 5개 카테고리(장소/의상/동작/표정/분위기) 추출 → 긍정/부정 프롬프트 조립
"""
from .analyzer import CategoryAnalyzer
from .assembler import PromptAssembler
from .exceptions import CategoryPromptError, ExtractionError
from .fixed_prompt import FixedPromptService, get_fixed_prompt_service
from .models import CategoryExtraction, MessageContext, PromptResult
from .service import CategoryPromptService, get_category_prompt_service
from .stats import ConversionStats

__all__ = [
    "CategoryAnalyzer",
    "PromptAssembler",
    "CategoryPromptError",
    "ExtractionError",
    "FixedPromptService",
    "get_fixed_prompt_service",
    "CategoryExtraction",
    "MessageContext",
    "PromptResult",
    "CategoryPromptService",
    "get_category_prompt_service",
    "ConversionStats",
]
