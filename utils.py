"""
Helpers around the Lazy sequence: logging setup, a registry of named
callables for declarative pipelines, pipeline processing with performance
measurement, and an unbounded natural-number source.
"""

import gc
import itertools
import logging
import sys
import time
import tracemalloc
from collections import deque
from typing import Any, Callable, Dict, List, Optional

from lazy import Lazy
from models import (
    ChunkingResult,
    LazySettings,
    OperationSpec,
    OperationType,
    PaginationResult,
    PerformanceInfo,
    PipelineResult,
)


# ---------- Logging Setup ----------

def setup_logging(level: str = "INFO") -> logging.Logger:
    """Setup structured logging for lazy pipelines"""
    logging.basicConfig(
        level=getattr(logging, level),
        format='%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    return logging.getLogger('lazy_pipeline')

settings = LazySettings.from_env()
logger = setup_logging(settings.log_level)


class PipelineError(ValueError):
    """Raised when a pipeline description cannot be built."""
    pass


# ---------- Named callables ----------

FUNCTION_REGISTRY: Dict[str, Callable] = {}
COMPARATOR_REGISTRY: Dict[str, Callable] = {}


def register_function(name: str, registry: Optional[Dict[str, Callable]] = None):
    """Decorator adding a callable to a registry under name"""
    target = FUNCTION_REGISTRY if registry is None else registry

    def decorator(fn):
        target[name] = fn
        logger.debug(f"Registered function: {name}")
        return fn
    return decorator


register_function("identity")(lambda x: x)
register_function("double")(lambda x: x * 2)
register_function("square")(lambda x: x * x)
register_function("increment")(lambda x: x + 1)
register_function("negate")(lambda x: -x)
register_function("to_string")(str)
register_function("is_even")(lambda x: x % 2 == 0)
register_function("is_odd")(lambda x: x % 2 == 1)
register_function("is_positive")(lambda x: x > 0)
register_function("ascending", COMPARATOR_REGISTRY)(lambda a, b: (a > b) - (a < b))
register_function("descending", COMPARATOR_REGISTRY)(lambda a, b: (a < b) - (a > b))


def resolve(name: str, registry: Dict[str, Callable]) -> Callable:
    try:
        return registry[name]
    except KeyError:
        raise PipelineError(f"Unknown function: {name}. Registered: {sorted(registry)}") from None


# ---------- Sources ----------

class Naturals:
    """Unbounded natural numbers; every traversal starts again at start"""

    def __init__(self, start: int = 0):
        self.start = start

    def __iter__(self):
        return itertools.count(self.start)


# ---------- Pipeline building ----------

def build_pipeline(source, operations: List[OperationSpec]) -> Lazy:
    """Apply each operation spec, in order, to a Lazy over source"""
    lazy_seq = Lazy.from_iterable(source)
    for op in operations:
        if op.type == OperationType.MAP:
            lazy_seq = lazy_seq.map(resolve(op.function, FUNCTION_REGISTRY))
        elif op.type == OperationType.FILTER:
            lazy_seq = lazy_seq.filter(resolve(op.function, FUNCTION_REGISTRY))
        elif op.type == OperationType.FLAT:
            depth = None if op.unbounded else (1 if op.depth is None else op.depth)
            lazy_seq = lazy_seq.flat(depth)
        elif op.type == OperationType.CONCAT:
            lazy_seq = lazy_seq.concat(*op.values)
        elif op.type == OperationType.TAKE:
            lazy_seq = lazy_seq.take(op.count)
        elif op.type == OperationType.SKIP:
            lazy_seq = lazy_seq.skip(op.count)
        elif op.type == OperationType.CHUNK:
            lazy_seq = lazy_seq.chunk(op.size)
        elif op.type == OperationType.SORT:
            comparator = resolve(op.comparator, COMPARATOR_REGISTRY) if op.comparator else None
            # sort materializes, so defer it until the pipeline is traversed
            lazy_seq = Lazy(_DeferredSort(lazy_seq, comparator))
    return lazy_seq


class _DeferredSort:
    def __init__(self, upstream: Lazy, comparator: Optional[Callable]):
        self._upstream = upstream
        self._comparator = comparator

    def __iter__(self):
        return iter(self._upstream.sort(self._comparator))


# ---------- Performance tracking ----------

MAX_RECORDED_OPERATIONS = 1000


def _empty_metrics() -> Dict[str, Any]:
    return {
        "operations": deque(maxlen=MAX_RECORDED_OPERATIONS),
        "total_time_ms": 0.0,
        "total_memory_mb": 0.0,
        "operation_count": 0
    }

_performance_metrics = _empty_metrics()


def _record(info: Dict[str, Any]):
    _performance_metrics["operations"].append(info)
    _performance_metrics["total_time_ms"] += info["execution_time_ms"]
    _performance_metrics["total_memory_mb"] += info["memory_usage_mb"]
    _performance_metrics["operation_count"] += 1


def measure_performance(operation_name: str, func, *args, **kwargs) -> Dict[str, Any]:
    """
    Measure performance of a function call with memory tracking.
    Tracing already started by the caller is left running; only its peak is reset.
    """
    owns_tracing = not tracemalloc.is_tracing()
    if owns_tracing:
        tracemalloc.start()
    else:
        tracemalloc.reset_peak()
    gc.collect()
    start_time = time.perf_counter()

    try:
        result = func(*args, **kwargs)
    except Exception as e:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        _, peak = tracemalloc.get_traced_memory()
        _record({
            "operation": operation_name,
            "execution_time_ms": execution_time_ms,
            "memory_usage_mb": peak / 1024 / 1024,
            "success": False,
            "error": str(e),
            "timestamp": time.time()
        })
        logger.error(f"{operation_name} failed after {execution_time_ms:.2f}ms: {e}")
        raise
    finally:
        _, peak = tracemalloc.get_traced_memory()
        if owns_tracing:
            tracemalloc.stop()

    info = {
        "operation": operation_name,
        "execution_time_ms": (time.perf_counter() - start_time) * 1000,
        "memory_usage_mb": peak / 1024 / 1024,
        "success": True,
        "result": result,
        "result_size": len(result) if hasattr(result, "__len__") else None,
        "timestamp": time.time()
    }
    _record({key: value for key, value in info.items() if key != "result"})
    return info


def get_recent_operations() -> List[Dict[str, Any]]:
    """The most recent MAX_RECORDED_OPERATIONS measurements, oldest first"""
    return list(_performance_metrics["operations"])


def get_performance_summary() -> Dict[str, Any]:
    """Get summary of all performance metrics"""
    count = _performance_metrics["operation_count"]
    if count == 0:
        return {
            "total_operations": 0,
            "total_time_ms": 0.0,
            "total_memory_mb": 0.0,
            "avg_time_ms": 0.0,
            "avg_memory_mb": 0.0
        }

    return {
        "total_operations": count,
        "total_time_ms": _performance_metrics["total_time_ms"],
        "total_memory_mb": _performance_metrics["total_memory_mb"],
        "avg_time_ms": _performance_metrics["total_time_ms"] / count,
        "avg_memory_mb": _performance_metrics["total_memory_mb"] / count
    }


def clear_performance_metrics():
    """Clear all performance metrics"""
    global _performance_metrics
    _performance_metrics = _empty_metrics()


def _performance(info: Dict[str, Any], input_size: int, output_size: int) -> PerformanceInfo:
    return PerformanceInfo(
        processing_time_ms=info["execution_time_ms"],
        memory_usage_mb=info["memory_usage_mb"],
        input_size=input_size,
        output_size=output_size,
        operation=info["operation"]
    )


# ---------- Processing ----------

def process_lazy_operations(source_data: List[Any], operations: List[OperationSpec]) -> PipelineResult:
    """Build and run a pipeline, returning its output with performance info"""
    pipeline = build_pipeline(source_data, operations)
    info = measure_performance("lazy_chain", pipeline.to_list)
    result = info["result"]

    return PipelineResult(
        result=result,
        operations_applied=[op.type.value for op in operations],
        performance=_performance(info, len(source_data), len(result))
    )


def process_pagination(source_data: List[Any], page_number: int, page_size: Optional[int] = None,
                       operations: Optional[List[OperationSpec]] = None) -> PaginationResult:
    """Process pagination with optional operations"""
    operations = operations or []
    page_size = page_size or settings.default_page_size
    pipeline = build_pipeline(source_data, operations)
    paginated = pipeline.page(page_number, page_size)

    info = measure_performance(f"pagination_page_{page_number}_size_{page_size}", paginated.to_list)
    page_data = info["result"]
    has_next_page = not pipeline.page(page_number + 1, page_size).empty()
    logger.info(f"Served page {page_number} with {len(page_data)} items")

    return PaginationResult(
        page_data=page_data,
        current_page=page_number,
        page_size=page_size,
        has_next_page=has_next_page,
        has_previous_page=page_number > 1,
        operations_applied=[op.type.value for op in operations],
        performance=_performance(info, len(source_data), len(page_data))
    )


def process_chunking(source_data: List[Any], chunk_size: int, max_chunks: Optional[int] = None,
                     operations: Optional[List[OperationSpec]] = None) -> ChunkingResult:
    """Process chunking with optional operations"""
    operations = operations or []
    chunked = build_pipeline(source_data, operations).chunk(chunk_size)
    if max_chunks is not None:
        chunked = chunked.take(max_chunks)

    info = measure_performance(f"chunking_size_{chunk_size}", chunked.map(list).to_list)
    chunks = info["result"]
    total_items = sum(len(chunk) for chunk in chunks)

    return ChunkingResult(
        chunks=chunks,
        total_chunks=len(chunks),
        total_items=total_items,
        chunk_size=chunk_size,
        max_chunks=max_chunks,
        operations_applied=[op.type.value for op in operations],
        performance=_performance(info, len(source_data), total_items)
    )
