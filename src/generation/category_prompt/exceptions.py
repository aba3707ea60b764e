class CategoryPromptError(Exception):
    """카테고리 프롬프트 파이프라인 기본 예외"""


class ExtractionError(CategoryPromptError):
    """LLM 카테고리 추출 실패 (추출기 내부에서만 발생/흡수)"""
