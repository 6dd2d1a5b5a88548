"""Tests del sink InfluxDB (cliente mockeado).

Ejecutar:
    pytest tests/test_influx_sink.py -v
"""

from unittest.mock import MagicMock

import pytest
from influxdb_client import WritePrecision

from conftest import EXAMPLE_TIME_NS
from lora_bridge.domain.point import Point
from lora_bridge.storage.influx_sink import InfluxSink, to_line_protocol


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def point() -> Point:
    return Point.from_envelope_tags(
        measurement="sensors",
        app_id="1",
        dev_name="d1",
        dev_eui="AA:BB",
        fields={"temp": 21.5, "rssi": -42},
        time_ns=EXAMPLE_TIME_NS,
    )


@pytest.fixture
def influx_client():
    client = MagicMock()
    client.write_api.return_value = MagicMock()
    return client


@pytest.fixture
def factory(influx_client):
    return MagicMock(return_value=influx_client)


@pytest.fixture
def sink(factory) -> InfluxSink:
    return InfluxSink(
        url="http://influx:8086",
        database="lora",
        username="writer",
        password="secret",
        timeout_ms=5000,
        client_factory=factory,
    )


# =============================================================================
# LINE PROTOCOL
# =============================================================================

class TestLineProtocol:

    def test_reference_point(self, point):
        line = to_line_protocol(point)

        measurement_and_tags, fields, timestamp = line.split(" ")
        assert measurement_and_tags == "sensors,app_id=1,dev_eui=AA:BB,dev_name=d1"
        assert sorted(fields.split(",")) == ["rssi=-42i", "temp=21.5"]
        assert timestamp == str(EXAMPLE_TIME_NS)

    def test_string_and_bool_fields(self, point):
        point.fields = {"label": "north", "ok": True}

        line = to_line_protocol(point)

        assert 'label="north"' in line
        assert "ok=true" in line

    def test_empty_fields_rejected(self, point):
        point.fields = {}

        with pytest.raises(ValueError, match="no fields"):
            to_line_protocol(point)

    def test_empty_measurement_rejected(self, point):
        point.measurement = ""

        with pytest.raises(ValueError, match="measurement"):
            to_line_protocol(point)


# =============================================================================
# ESCRITURA
# =============================================================================

class TestWrite:

    def test_write_success(self, sink, factory, influx_client, point):
        assert sink.write(point) is True

        factory.assert_called_once_with(
            url="http://influx:8086",
            token="writer:secret",
            org="-",
            timeout=5000,
        )
        write_api = influx_client.write_api.return_value
        write_api.write.assert_called_once()
        kwargs = write_api.write.call_args.kwargs
        assert kwargs["bucket"] == "lora"
        assert kwargs["write_precision"] == WritePrecision.NS
        assert kwargs["record"].startswith("sensors,app_id=1,dev_eui=AA:BB,dev_name=d1 ")
        influx_client.close.assert_called_once()

    def test_new_client_per_write(self, sink, factory, influx_client, point):
        sink.write(point)
        sink.write(point)

        assert factory.call_count == 2
        assert influx_client.close.call_count == 2

    def test_no_credentials_no_token(self, factory, point):
        sink = InfluxSink(url="http://influx:8086", database="lora", client_factory=factory)

        sink.write(point)

        assert factory.call_args.kwargs["token"] is None

    def test_client_creation_failure(self, sink, factory, point, caplog):
        factory.side_effect = ValueError("bad url")

        with caplog.at_level("ERROR"):
            assert sink.write(point) is False

        assert "stage=client" in caplog.text
        assert "bad url" in caplog.text

    def test_batch_failure(self, sink, influx_client, point, caplog):
        influx_client.write_api.side_effect = RuntimeError("no api")

        with caplog.at_level("ERROR"):
            assert sink.write(point) is False

        assert "stage=batch" in caplog.text
        influx_client.close.assert_called_once()

    def test_empty_fields_never_written(self, sink, influx_client, point, caplog):
        point.fields = {}

        with caplog.at_level("ERROR"):
            assert sink.write(point) is False

        influx_client.write_api.return_value.write.assert_not_called()
        influx_client.close.assert_called_once()
        assert "stage=point" in caplog.text

    def test_write_failure_not_retried(self, sink, influx_client, point, caplog):
        write_api = influx_client.write_api.return_value
        write_api.write.side_effect = ConnectionError("influx down")

        with caplog.at_level("ERROR"):
            assert sink.write(point) is False

        write_api.write.assert_called_once()
        influx_client.close.assert_called_once()
        assert "stage=write" in caplog.text
        assert "influx down" in caplog.text

    def test_from_settings(self):
        settings = MagicMock(
            influxdb_server="http://db:8086",
            influxdb_db="telemetry",
            influxdb_username="",
            influxdb_password="",
            influxdb_timeout_ms=1000,
        )

        sink = InfluxSink.from_settings(settings)

        assert sink._url == "http://db:8086"
        assert sink._database == "telemetry"
        assert sink._token is None
