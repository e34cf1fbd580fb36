"""
Rate limiting для защиты от спама
"""
import time
from typing import Dict
from collections import defaultdict, deque
from config.settings import settings
from utils.exceptions import RateLimitError
from utils.logger import logger

class RateLimiter:
    """Простой rate limiter на основе sliding window"""

    def __init__(self, max_requests: int = 30, window_seconds: int = 60):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.requests: Dict[int, deque] = defaultdict(deque)

    def _evict(self, user_id: int, now: float) -> deque:
        user_requests = self.requests[user_id]
        while user_requests and user_requests[0] <= now - self.window_seconds:
            user_requests.popleft()
        return user_requests

    def is_allowed(self, user_id: int) -> bool:
        """Проверяет, разрешен ли запрос для пользователя"""
        now = time.time()
        user_requests = self._evict(user_id, now)

        if len(user_requests) >= self.max_requests:
            logger.warning(f"Rate limit exceeded for user {user_id}")
            return False

        user_requests.append(now)
        return True

    def get_remaining_requests(self, user_id: int) -> int:
        """Возвращает количество оставшихся запросов"""
        user_requests = self._evict(user_id, time.time())
        return max(0, self.max_requests - len(user_requests))

    def reset_user(self, user_id: int):
        """Сбрасывает лимит для пользователя"""
        self.requests.pop(user_id, None)

# Глобальный rate limiter
rate_limiter = RateLimiter(
    max_requests=settings.bot.rate_limit_requests,
    window_seconds=settings.bot.rate_limit_window
)

def check_rate_limit(user_id: int) -> None:
    """Проверяет rate limit и выбрасывает исключение при превышении"""
    if not rate_limiter.is_allowed(user_id):
        raise RateLimitError(
            "Too many requests. Please try again in a minute.",
            error_code="rate_limited"
        )
