import logging
import sys
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from functools import wraps
from typing import Any, ParamSpec, TypeVar, cast

from prometheus_client import REGISTRY, Counter, Histogram

# --- Correlation IDs ---
correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="system")

# --- Prometheus Metrics ---
DURATION_METRIC = "dailymix_method_duration_seconds"
SHORTFALL_METRIC = "dailymix_selection_shortfall"

METHOD_DURATION: Histogram
SELECTION_SHORTFALL: Counter


def _registered(name: str) -> Any:
    # Streamlit re-executes modules on rerun; reuse what is already registered.
    return REGISTRY._names_to_collectors[name]


try:
    METHOD_DURATION = Histogram(
        DURATION_METRIC, "Time spent in method", ["component", "method"]
    )
except ValueError:
    METHOD_DURATION = cast(Histogram, _registered(DURATION_METRIC))

try:
    SELECTION_SHORTFALL = Counter(
        SHORTFALL_METRIC, "Questions missing from a daily selection"
    )
except ValueError:
    # Counters register under both the base name and the _total suffix
    SELECTION_SHORTFALL = cast(Counter, _registered(SHORTFALL_METRIC))

P = ParamSpec("P")
R = TypeVar("R")


def measure_time(metric_name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Times an instance method into METHOD_DURATION and logs the duration
    through the instance's ``telemetry`` attribute when it has one.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start = time.perf_counter()
            self_obj: Any = args[0] if args else None
            component = self_obj.__class__.__name__ if self_obj else "Unknown"
            telemetry = getattr(self_obj, "telemetry", None)

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - start
                METHOD_DURATION.labels(component=component, method=func.__name__).observe(
                    duration
                )
                if telemetry:
                    telemetry.log_error(
                        f"Failed: {metric_name}",
                        e,
                        duration_ms=round(duration * 1000, 2),
                    )
                raise

            duration = time.perf_counter() - start
            METHOD_DURATION.labels(component=component, method=func.__name__).observe(
                duration
            )
            if telemetry:
                telemetry.log_info(metric_name, duration_ms=round(duration * 1000, 2))
            return result

        return wrapper

    return decorator


class Telemetry:
    """
    Facade for logs and correlation ids. One instance per component.
    """

    def __init__(self, component_name: str) -> None:
        self.component = component_name
        self.logger: logging.Logger
        self._setup_logger()

    def _setup_logger(self) -> None:
        self.logger = logging.getLogger(self.component)

        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
            )
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    def __getstate__(self) -> dict[str, Any]:
        """Loggers hold locks and cannot be pickled into session state."""
        state = self.__dict__.copy()
        state.pop("logger", None)
        return state

    def __setstate__(self, state: dict[str, Any]) -> None:
        self.__dict__.update(state)
        self._setup_logger()

    @staticmethod
    def start_trace() -> str:
        c_id = str(uuid.uuid4())[:8]
        correlation_id_ctx.set(c_id)
        return c_id

    @staticmethod
    def get_trace_id() -> str:
        return correlation_id_ctx.get()

    def _format(self, event: str, kwargs: dict[str, Any]) -> str:
        return f"[{self.get_trace_id()}] {event} | {kwargs}"

    def log_info(self, event: str, **kwargs: Any) -> None:
        self.logger.info(self._format(event, kwargs))

    def log_warning(self, event: str, **kwargs: Any) -> None:
        self.logger.warning(self._format(event, kwargs))

    def log_error(self, event: str, error: Exception, **kwargs: Any) -> None:
        msg = f"[{self.get_trace_id()}] {event} | Error: {error} | {kwargs}"
        self.logger.error(msg, exc_info=error)

    def record_shortfall(self, missing: int, **kwargs: Any) -> None:
        SELECTION_SHORTFALL.inc(missing)
        self.log_warning("Selection shortfall", missing=missing, **kwargs)
