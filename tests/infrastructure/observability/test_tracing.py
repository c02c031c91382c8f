import pytest

from glass_gateway.infrastructure.observability import tracing


@pytest.fixture(autouse=True)
def _reset_tracing_flag(monkeypatch) -> None:
    monkeypatch.setattr(tracing, "_TRACING_CONFIGURED", False)
    for name in ("OTEL_TRACES_EXPORTER", "OTEL_EXPORTER_OTLP_ENDPOINT", "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)


def test_tracing_is_a_no_op_without_endpoint() -> None:
    assert tracing.configure_tracing(service_name="glass-gateway") is False


def test_exporter_disabled_explicitly(monkeypatch) -> None:
    monkeypatch.setenv("OTEL_TRACES_EXPORTER", "none")
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4318")

    assert tracing.configure_tracing(service_name="glass-gateway") is False


def test_exporter_without_endpoint_fails_loudly(monkeypatch) -> None:
    monkeypatch.setenv("OTEL_TRACES_EXPORTER", "otlp")

    with pytest.raises(RuntimeError):
        tracing.configure_tracing(service_name="glass-gateway")
