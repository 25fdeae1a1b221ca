import pickle
from unittest.mock import Mock

import pytest
from prometheus_client import REGISTRY

from src.shared.telemetry import Telemetry, measure_time


class Timed:
    def __init__(self) -> None:
        self.telemetry = Mock()

    @measure_time("work")
    def work(self, x: int) -> int:
        return x * 2

    @measure_time("explode")
    def explode(self) -> None:
        raise RuntimeError("boom")


def test_measure_time_returns_result_and_logs():
    timed = Timed()

    assert timed.work(21) == 42
    timed.telemetry.log_info.assert_called_once()
    assert timed.telemetry.log_info.call_args.args[0] == "work"
    assert "duration_ms" in timed.telemetry.log_info.call_args.kwargs


def test_measure_time_logs_and_reraises_errors():
    timed = Timed()

    with pytest.raises(RuntimeError, match="boom"):
        timed.explode()

    timed.telemetry.log_error.assert_called_once()
    assert isinstance(timed.telemetry.log_error.call_args.args[1], RuntimeError)


def test_measure_time_records_histogram():
    labels = {"component": "Timed", "method": "work"}
    before = REGISTRY.get_sample_value("dailymix_method_duration_seconds_count", labels) or 0

    Timed().work(1)

    after = REGISTRY.get_sample_value("dailymix_method_duration_seconds_count", labels)
    assert after == before + 1


def test_record_shortfall_increments_counter():
    telemetry = Telemetry("TestShortfall")
    before = REGISTRY.get_sample_value("dailymix_selection_shortfall_total") or 0

    telemetry.record_shortfall(3, user_id="u1")

    assert REGISTRY.get_sample_value("dailymix_selection_shortfall_total") == before + 3


def test_trace_id_is_propagated():
    trace_id = Telemetry.start_trace()

    assert Telemetry.get_trace_id() == trace_id
    assert len(trace_id) == 8


def test_telemetry_survives_pickling():
    telemetry = Telemetry("PickleMe")

    restored = pickle.loads(pickle.dumps(telemetry))

    assert restored.component == "PickleMe"
    assert restored.logger.name == "PickleMe"
