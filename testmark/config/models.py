from typing import Literal

from pydantic import BaseModel, field_validator


class TestmarkConfig(BaseModel):
    # Keep pytest from collecting this as a test class.
    __test__ = False

    regen: bool = False
    patterns: list[str] = ["*.md"]
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"

    @field_validator("patterns")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        patterns = [p.strip() for p in v]
        if not patterns:
            raise ValueError("at least one file pattern is required")
        if not all(patterns):
            raise ValueError("file patterns must not be blank")
        return patterns
