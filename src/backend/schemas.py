from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatHistoryItem(BaseModel):
    role: Literal["user", "assistant", "system"] = "user"
    content: str = ""


class ConvertRequest(BaseModel):
    # 빈 메시지도 허용 (기본 프롬프트 반환)
    message: str = Field(default="", max_length=4000)
    gender: Literal["female", "male"] = "female"
    quality_level: Optional[str] = Field(default=None, description="draft | standard | high | premium")
    chat_history: List[ChatHistoryItem] = Field(default_factory=list)
    age: Optional[int] = Field(default=None, ge=1, le=120)


class BatchConvertRequest(BaseModel):
    messages: List[ConvertRequest] = Field(min_length=1, max_length=50)


class AnalyzeRequest(BaseModel):
    message: str = Field(default="", max_length=4000)
    gender: Literal["female", "male"] = "female"
    chat_history: List[ChatHistoryItem] = Field(default_factory=list)


class GenerationInfoResponse(BaseModel):
    gender: Literal["female", "male"]
    template_used: str
    quality_level: str
    categories_filled: int
    extraction_method: str
    generated_at: str


class CategoryBreakdown(BaseModel):
    location_environment: str
    outfit_style: str
    action_pose: str
    expression_emotion: str
    atmosphere_lighting: str


class PromptResultResponse(BaseModel):
    positive_prompt: str
    negative_prompt: str
    category_breakdown: CategoryBreakdown
    quality_score: float
    generation_info: GenerationInfoResponse

    model_config = ConfigDict(from_attributes=True)


class BatchConvertResponse(BaseModel):
    count: int
    results: List[PromptResultResponse]


class ValidationResponse(BaseModel):
    is_valid: bool
    issues: List[str] = []
    recommendations: List[str] = []


class AnalyzeResponse(BaseModel):
    original_message: str
    extracted_keywords: Dict[str, str]
    mapped_prompts: Dict[str, str]
    categories_filled: int
    hidden_tags: Dict[str, str] = {}
    analysis_method: str
    processing_time_ms: float
    error: Optional[str] = None
    analyzed_at: str


class StatsResponse(BaseModel):
    total_conversions: int
    successful_conversions: int
    failed_conversions: int
    fallback_conversions: int
    avg_processing_time_ms: float
    success_rate: float
    fallback_rate: float
    mappings_version: str


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded", "unhealthy"]
    success_rate: float
    recent_success_rate: float
    window_size: int
    avg_response_time: float
    total_requests: int
    fallback_rate: float
    last_check: str


class CategoriesResponse(BaseModel):
    categories: List[str]
    keywords: Dict[str, List[str]]
    quality_levels: List[str]
    mappings_version: str


class FixedPromptRequest(BaseModel):
    generated_prompt: str = Field(default="", max_length=2000)
    relationship_type: str = "common"
    gender: Literal["female", "male"] = "female"


class FixedPromptResponse(BaseModel):
    positive: str
    negative: str
