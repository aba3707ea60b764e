"""
변환 통계 / 헬스 상태 (프로세스 메모리, 서비스 인스턴스 단위)

- 성공률: 예외 없이 PromptResult 를 돌려준 비율. LLM 실패 후 기본값으로
  조립된 변환(fallback)도 성공으로 센다. fallback 은 별도 수치로도 노출
- 헬스: 최근 window 건의 성공률 기준
    >= 90 healthy / >= 70 degraded / 그 외 unhealthy (요청 없음은 healthy)
"""

from collections import deque
from datetime import datetime, timezone
from typing import Callable, Deque, Dict, Optional

HEALTHY_THRESHOLD = 90.0
DEGRADED_THRESHOLD = 70.0


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ConversionStats:
    def __init__(
        self,
        window_size: int = 100,
        timestamp: Callable[[], str] = _utc_now_iso,
    ):
        if window_size <= 0:
            raise ValueError("window_size는 1 이상이어야 합니다.")
        self.window_size = window_size
        self._timestamp = timestamp
        self._recent: Deque[bool] = deque(maxlen=window_size)
        self.reset()

    def reset(self) -> None:
        self.total_conversions = 0
        self.successful_conversions = 0
        self.failed_conversions = 0
        self.fallback_conversions = 0
        self.total_processing_time_ms = 0.0
        self._recent.clear()

    def record_conversion(self, success: bool, latency_ms: float, fallback: bool = False) -> None:
        # await 없이 한 번에 갱신 (이벤트 루프 내에서 원자적)
        self.total_conversions += 1
        if success:
            self.successful_conversions += 1
        else:
            self.failed_conversions += 1
        if fallback:
            self.fallback_conversions += 1
        self.total_processing_time_ms += max(0.0, latency_ms)
        self._recent.append(success)

    @staticmethod
    def _rate(part: int, total: int) -> float:
        return round(part / total * 100, 2) if total else 0.0

    def get_stats(self) -> Dict:
        total = self.total_conversions
        return {
            "total_conversions": total,
            "successful_conversions": self.successful_conversions,
            "failed_conversions": self.failed_conversions,
            "fallback_conversions": self.fallback_conversions,
            "avg_processing_time_ms": round(self.total_processing_time_ms / total, 2) if total else 0.0,
            "success_rate": self._rate(self.successful_conversions, total),
            "fallback_rate": self._rate(self.fallback_conversions, total),
        }

    def recent_success_rate(self) -> Optional[float]:
        if not self._recent:
            return None
        return self._rate(sum(self._recent), len(self._recent))

    def get_health(self) -> Dict:
        recent_rate = self.recent_success_rate()
        if recent_rate is None or recent_rate >= HEALTHY_THRESHOLD:
            status = "healthy"
        elif recent_rate >= DEGRADED_THRESHOLD:
            status = "degraded"
        else:
            status = "unhealthy"

        stats = self.get_stats()
        return {
            "status": status,
            "success_rate": stats["success_rate"],
            "recent_success_rate": 100.0 if recent_rate is None else recent_rate,
            "window_size": self.window_size,
            "avg_response_time": stats["avg_processing_time_ms"],
            "total_requests": stats["total_conversions"],
            "fallback_rate": stats["fallback_rate"],
            "last_check": self._timestamp(),
        }
