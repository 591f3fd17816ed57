"""Result and configuration types shared by every tier."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from price_scraper.config import DEFAULT_USER_AGENT

STATIC_TIMEOUT_MS = 10000
RENDERED_TIMEOUT_MS = 30000

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


class ExtractionMethod(str, Enum):
    """Tier that produced a result."""

    STATIC = "static"
    RENDERED = "rendered"
    AI = "ai"


@dataclass(frozen=True)
class ExtractionConfig:
    """Per-call fetch configuration."""

    timeout_ms: int = STATIC_TIMEOUT_MS
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def for_static(cls, user_agent: str = DEFAULT_USER_AGENT) -> "ExtractionConfig":
        return cls(timeout_ms=STATIC_TIMEOUT_MS, user_agent=user_agent)

    @classmethod
    def for_rendered(cls, user_agent: str = DEFAULT_USER_AGENT) -> "ExtractionConfig":
        return cls(timeout_ms=RENDERED_TIMEOUT_MS, user_agent=user_agent)


@dataclass(frozen=True)
class ProductData:
    """Extracted product fields. Price is in minor units (cents)."""

    title: Optional[str] = None
    price: Optional[int] = None
    currency: Optional[str] = None
    image_url: Optional[str] = None

    def __post_init__(self):
        if self.price is not None:
            if isinstance(self.price, bool) or not isinstance(self.price, int) or self.price < 0:
                raise ValueError(f"price must be a non-negative integer in minor units, got {self.price!r}")
        if self.currency is not None and not _CURRENCY_RE.match(self.currency):
            raise ValueError(f"currency must be a 3-letter uppercase ISO 4217 code, got {self.currency!r}")

    @property
    def is_complete(self) -> bool:
        """True when title, price and image are all present."""
        return bool(self.title) and self.price is not None and bool(self.image_url)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "price": self.price,
            "currency": self.currency,
            "imageUrl": self.image_url,
        }


@dataclass(frozen=True)
class ExtractionResult:
    """Uniform output of every tier and of the orchestrator."""

    success: bool
    method: ExtractionMethod
    data: Optional[ProductData] = None
    error: Optional[str] = None
    error_type: Optional[str] = field(default=None)

    @classmethod
    def ok(cls, data: ProductData, method: ExtractionMethod) -> "ExtractionResult":
        return cls(success=True, method=method, data=data)

    @classmethod
    def fail(
        cls,
        error: str,
        method: ExtractionMethod,
        error_type: Optional[str] = None,
    ) -> "ExtractionResult":
        return cls(success=False, method=method, error=error or "Unknown error", error_type=error_type)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the shape persisted by the job queue consumer."""
        payload: Dict[str, Any] = {"success": self.success, "method": self.method.value}
        if self.success and self.data is not None:
            payload["data"] = self.data.to_dict()
        else:
            payload["error"] = self.error
            if self.error_type:
                payload["errorType"] = self.error_type
        return payload
