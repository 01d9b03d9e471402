from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    TypedDict,
    runtime_checkable,
)
import asyncio
import logging
import random
import uuid
from abc import ABC, abstractmethod
from enum import Enum
from time import perf_counter

from app.core.exceptions import CaptionProcessingError, PipelineError


@dataclass(slots=True)
class PipelineContext:
    """Context shared by the steps of one caption or entity run.

    - input: the request payload (transcript, audio path, NER token lines ...)
    - artifacts: data produced by one step for the next; the run id is kept
      here under a reserved key
    """

    RUN_ID_KEY: ClassVar[str] = "_run_id"

    input: Mapping[str, Any]
    artifacts: Dict[str, Any] = field(default_factory=dict)

    def set(self, key: str, value: Any) -> None:
        self.artifacts[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.artifacts.get(key, default)

    def has(self, key: str) -> bool:
        return key in self.artifacts

    def remove(self, key: str) -> None:
        self.artifacts.pop(key, None)

    def update(self, **items: Any) -> None:
        self.artifacts.update(items)

    def require(self, keys: List[str]) -> None:
        missing = [k for k in keys if k not in self.artifacts]
        if missing:
            raise KeyError(f"Missing required context keys: {', '.join(missing)}")

    def get_run_id(self) -> Optional[str]:
        return self.get(self.RUN_ID_KEY, None)

    def set_run_id(self, run_id: str) -> None:
        self.set(self.RUN_ID_KEY, run_id)

    def ensure_run_id(self, factory: Optional[Callable[[], str]] = None) -> str:
        rid = self.get_run_id()
        if not rid and factory:
            rid = factory()
        if not rid:
            rid = str(uuid.uuid4())
        self.set_run_id(rid)
        return rid


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@runtime_checkable
class Step(Protocol):
    async def __call__(
        self, context: PipelineContext
    ) -> None:  # pragma: no cover - protocol
        ...


logger = logging.getLogger(__name__)


class BaseStep(ABC):
    """Base class for pipeline steps with lifecycle hooks, status, retry & timeout.

    Inputs named in ``required_keys`` may come from the context artifacts or
    from the run input.
    """

    name: str = "base_step"

    required_keys: List[str] = []
    retries: int = 0
    retry_backoff: float = 0.5  # seconds
    timeout: Optional[float] = None  # seconds
    use_exponential_backoff: bool = True
    max_backoff: float = 5.0
    jitter: float = 0.1
    # Only these exception types are retried; empty means any exception.
    # Per-type overrides, e.g. {AlignmentServiceError: {"retries": 2}}
    retry_exceptions: Dict[type[Exception], Dict[str, Any]] = {}

    status: StepStatus = StepStatus.PENDING
    last_error: Optional[Exception] = None
    duration: float = 0.0
    attempts: int = 0

    async def __call__(self, context: PipelineContext) -> None:
        self.last_error = None
        self.attempts = 0

        if not self.validate_inputs(context):
            missing = [k for k in self.required_keys if not self._available(context, k)]
            raise KeyError(
                f"Missing required inputs for step '{self.name}': {', '.join(missing)}"
            )

        if self.can_skip(context):
            self.status = StepStatus.SKIPPED
            self.on_skip(context)
            return

        while True:
            self.attempts += 1
            self.status = StepStatus.RUNNING
            self.on_start(context)
            start = perf_counter()
            try:
                if self.timeout:
                    await asyncio.wait_for(self.run(context), timeout=self.timeout)
                else:
                    await self.run(context)
                self.status = StepStatus.COMPLETED
                return
            except Exception as e:  # noqa: BLE001
                self.last_error = e
                self.status = StepStatus.FAILED
                retries, delay = self._retry_policy(e)
                if self.attempts <= retries:
                    logger.warning(
                        "Step %s attempt %d failed (%s); retrying in %.2fs",
                        self.name,
                        self.attempts,
                        e,
                        delay,
                    )
                    await asyncio.sleep(delay)
                    continue
                raise
            finally:
                self.duration = perf_counter() - start
                self.on_finish(context, self.duration)

    def _retry_policy(self, error: Exception) -> Tuple[int, float]:
        """Effective (retries, sleep seconds) for ``error`` on the current attempt."""
        retries = self.retries
        backoff = self.retry_backoff
        max_backoff = self.max_backoff
        jitter = self.jitter
        exponential = self.use_exponential_backoff

        if self.retry_exceptions:
            for exc_type, cfg in self.retry_exceptions.items():
                if isinstance(error, exc_type):
                    retries = int(cfg.get("retries", retries))
                    backoff = float(cfg.get("retry_backoff", backoff))
                    max_backoff = float(cfg.get("max_backoff", max_backoff))
                    jitter = float(cfg.get("jitter", jitter))
                    exponential = bool(cfg.get("use_exponential_backoff", exponential))
                    break
            else:
                return 0, 0.0

        base = max(0.0, backoff)
        delay = base * (2 ** max(0, self.attempts - 1)) if exponential else base
        delay = min(max_backoff, delay)
        delay += random.uniform(0.0, max(0.0, jitter))
        return retries, delay

    @abstractmethod
    async def run(
        self, context: PipelineContext
    ) -> None:  # pragma: no cover - abstract
        ...

    # Hooks
    def on_start(self, context: PipelineContext) -> None:
        logger.debug("Step %s start", self.name)

    def on_finish(self, context: PipelineContext, duration: float) -> None:
        logger.info(
            "Step %s finished in %.3fs with status=%s attempts=%d run_id=%s",
            self.name,
            duration,
            self.status.value,
            self.attempts,
            context.get_run_id(),
        )

    def on_skip(self, context: PipelineContext) -> None:
        logger.info("Step %s skipped", self.name)

    # Utilities
    @staticmethod
    def _available(context: PipelineContext, key: str) -> bool:
        return context.has(key) or key in (context.input or {})

    @staticmethod
    def lookup(context: PipelineContext, key: str, default: Any = None) -> Any:
        """Artifact ``key`` if a previous step produced it, else the run input value."""
        if context.has(key):
            return context.get(key)
        return (context.input or {}).get(key, default)

    def validate_inputs(self, context: PipelineContext) -> bool:
        if not self.required_keys:
            return True
        return all(self._available(context, k) for k in self.required_keys)

    def can_skip(self, context: PipelineContext) -> bool:
        return False


class StepResult(TypedDict):  # pragma: no cover - typing helper
    name: str
    status: str
    duration: float
    error: Optional[str]
    attempts: int


class PipelineResult(TypedDict):  # pragma: no cover - typing helper
    success: bool
    duration: float
    steps: List[StepResult]
    error: Optional[str]
    context: PipelineContext


class Pipeline:
    """Runs steps in order.

    With ``fail_fast`` the first failing step stops the run: processing errors
    propagate unchanged and anything else is wrapped in PipelineError.
    Otherwise the failure is recorded and the next step runs.
    """

    def __init__(self, steps: List[Step], *, fail_fast: bool = True):
        self._steps = steps
        self.fail_fast = fail_fast

    @property
    def steps(self) -> List[Step]:
        return list(self._steps)

    async def execute(self, context: PipelineContext) -> PipelineResult:
        context.ensure_run_id()

        pipeline_start = perf_counter()
        results: Dict[str, Any] = {
            "success": False,
            "duration": 0.0,
            "steps": [],
            "error": None,
        }

        for step in self._steps:
            step_info: Dict[str, Any] = {
                "name": getattr(step, "name", step.__class__.__name__),
                "status": StepStatus.PENDING.value,
                "duration": 0.0,
                "error": None,
                "attempts": 0,
            }
            results["steps"].append(step_info)

            step_start = perf_counter()
            try:
                await step(context)
                step_info["status"] = getattr(
                    step, "status", StepStatus.COMPLETED
                ).value
                step_info["attempts"] = int(getattr(step, "attempts", 1) or 1)
            except Exception as e:  # noqa: BLE001
                step_info["status"] = StepStatus.FAILED.value
                step_info["error"] = str(e)
                step_info["attempts"] = int(getattr(step, "attempts", 1) or 1)
                if results["error"] is None:
                    results["error"] = f"{step_info['name']}: {e}"
                if self.fail_fast:
                    if isinstance(e, CaptionProcessingError):
                        raise
                    raise PipelineError(
                        f"Step {step_info['name']} failed: {e}",
                        stage_name=step_info["name"],
                        stage_errors=[str(e)],
                    ) from e
                logger.error("Step %s failed: %s", step_info["name"], e)
            finally:
                step_info["duration"] = perf_counter() - step_start

        results["duration"] = perf_counter() - pipeline_start
        results["success"] = all(
            s.get("status") in (StepStatus.COMPLETED.value, StepStatus.SKIPPED.value)
            for s in results["steps"]
        )
        results["context"] = context
        return results


class Middleware(Protocol):  # pragma: no cover - optional extension point
    def __call__(self, step: Step) -> Step: ...


def make_logging_middleware(
    logger_obj: logging.Logger | None = None,
    level_before: int = logging.DEBUG,
    level_after: int = logging.INFO,
) -> Middleware:
    """Return a middleware that logs before and after each step execution.

    Logs include: step name, run_id, status, attempts, duration.
    """
    _log = logger_obj or logger

    def _middleware(step: Step) -> Step:
        class _Wrapped:
            def __init__(self, inner: Step):
                self._inner = inner

            def __getattr__(self, item):  # delegate attributes like 'name'
                return getattr(self._inner, item)

            async def __call__(self, context: PipelineContext) -> None:
                step_name = getattr(self._inner, "name", self._inner.__class__.__name__)
                rid = context.get_run_id()
                _log.log(level_before, "[run_id=%s] Step %s BEGIN", rid, step_name)
                start = perf_counter()
                try:
                    await self._inner(context)
                finally:
                    status = getattr(self._inner, "status", StepStatus.PENDING)
                    _log.log(
                        level_after,
                        "[run_id=%s] Step %s END status=%s attempts=%d duration=%.3fs",
                        rid,
                        step_name,
                        getattr(status, "value", str(status)),
                        int(getattr(self._inner, "attempts", 0) or 0),
                        perf_counter() - start,
                    )

        return _Wrapped(step)

    return _middleware
