"""Models describing declarative lazy pipelines, their results and settings."""

import os
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class OperationType(str, Enum):
    """Supported pipeline steps"""
    MAP = "map"
    FILTER = "filter"
    FLAT = "flat"
    CONCAT = "concat"
    TAKE = "take"
    SKIP = "skip"
    CHUNK = "chunk"
    SORT = "sort"


class OperationSpec(BaseModel):
    """One combinator step, referring to callables by registered name."""
    type: OperationType = Field(..., description="Combinator to apply")
    function: Optional[str] = Field(
        None,
        description="Registered function name for map/filter"
    )
    comparator: Optional[str] = Field(
        None,
        description="Registered comparator name for sort; lexical order when omitted"
    )
    count: Optional[int] = Field(
        None,
        description="Element count for take/skip",
        ge=0
    )
    size: Optional[int] = Field(
        None,
        description="Chunk size",
        ge=1
    )
    depth: Optional[int] = Field(
        None,
        description="Flatten depth, 1 when omitted",
        ge=0
    )
    unbounded: bool = Field(
        False,
        description="Flatten every nesting level, ignoring depth"
    )
    values: List[Any] = Field(
        default_factory=list,
        description="Arguments appended by concat"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"type": "take", "count": 5}
        }
    )

    @model_validator(mode='after')
    def validate_required_arguments(self):
        """Each step type needs its own argument."""
        if self.type in (OperationType.MAP, OperationType.FILTER) and not self.function:
            raise ValueError(f"{self.type.value} requires a function name")
        if self.type in (OperationType.TAKE, OperationType.SKIP) and self.count is None:
            raise ValueError(f"{self.type.value} requires a count")
        if self.type == OperationType.CHUNK and self.size is None:
            raise ValueError("chunk requires a size")
        return self


class PipelineRequest(BaseModel):
    """A source plus the ordered steps to run over it."""
    source: List[Any] = Field(..., description="Input elements")
    operations: List[OperationSpec] = Field(
        default_factory=list,
        description="Steps applied left to right"
    )


class PerformanceInfo(BaseModel):
    """Timing and memory for one processed pipeline."""
    processing_time_ms: float = Field(..., ge=0)
    memory_usage_mb: float = Field(..., ge=0)
    input_size: int = Field(..., ge=0)
    output_size: int = Field(..., ge=0)
    operation: str


class PipelineResult(BaseModel):
    result: List[Any]
    operations_applied: List[str]
    performance: PerformanceInfo


class PaginationResult(BaseModel):
    page_data: List[Any]
    current_page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    has_next_page: bool
    has_previous_page: bool
    operations_applied: List[str]
    performance: PerformanceInfo


class ChunkingResult(BaseModel):
    chunks: List[List[Any]]
    total_chunks: int = Field(..., ge=0)
    total_items: int = Field(..., ge=0)
    chunk_size: int = Field(..., ge=1)
    max_chunks: Optional[int] = None
    operations_applied: List[str]
    performance: PerformanceInfo


class LazySettings(BaseModel):
    """Runtime settings, read from LAZY_* environment variables."""
    log_level: str = Field("INFO", description="Root log level")
    default_page_size: int = Field(10, description="Page size when none is given", ge=1)

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Normalize and check the level name."""
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @classmethod
    def from_env(cls) -> "LazySettings":
        values = {}
        if "LAZY_LOG_LEVEL" in os.environ:
            values["log_level"] = os.environ["LAZY_LOG_LEVEL"]
        if "LAZY_PAGE_SIZE" in os.environ:
            values["default_page_size"] = os.environ["LAZY_PAGE_SIZE"]
        return cls(**values)
