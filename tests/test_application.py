"""End-to-end tests for the alerter application."""

import asyncio
import logging

import pytest

from conftest import NATIONAL_ALERT, TORNADO_WARNING, WEEKLY_TEST, FakeClock, FakeSink
from same_mesh_alerter.core.application import AlerterApplication
from same_mesh_alerter.core.config import AppConfig, ConfigurationError
from same_mesh_alerter.processing.pipeline import ProcessingStage
from same_mesh_alerter.same.source import HeaderFileSource, parse_decoder_line


def make_app(config, tmp_path, *headers):
    decoded = tmp_path / "decoded.txt"
    lines = []
    for header in headers:
        lines.extend([header, "NNNN"])
    decoded.write_text("\n".join(lines) + "\n", encoding="utf-8")

    clock = FakeClock()
    sink = FakeSink(clock=clock)
    app = AlerterApplication(
        config,
        source=HeaderFileSource(decoded),
        sink=sink,
        engine_options={"clock": clock, "sleep": clock.sleep},
    )
    return app, sink


def test_warning_relayed_on_alert_channel(app_config, tmp_path, caplog):
    caplog.set_level(logging.INFO, logger="same_mesh_alerter")
    app, sink = make_app(app_config, tmp_path, TORNADO_WARNING)

    asyncio.run(app.run())

    message = " ".join(sink.texts)
    assert message.startswith("🚨")
    assert "Issued By: National Weather Service" in message
    assert message.endswith(", Location: Exampleton")
    assert {channel for _, channel, _ in sink.calls} == {0}
    assert sink.closed
    assert "End SAME voice message" in caplog.text
    assert "Program stopped, no longer monitoring" in caplog.text


def test_test_alert_without_test_channel(app_config, tmp_path, caplog):
    caplog.set_level(logging.INFO, logger="same_mesh_alerter")
    app, sink = make_app(app_config, tmp_path, WEEKLY_TEST)

    asyncio.run(app.run())

    assert sink.calls == []
    assert "Ignoring test alert" in caplog.text
    assert app.get_status()["processing"]["stage_counts"]["suppressed"] == 1


def test_national_alert(app_config, tmp_path):
    app, sink = make_app(app_config, tmp_path, NATIONAL_ALERT)

    asyncio.run(app.run())

    assert " ".join(sink.texts).endswith(" Nationwide Alert")


def test_alerts_are_rate_limited_end_to_end(app_config, tmp_path):
    second = "ZCZC-WXR-SVR-048083+0030-1051705-KCLE/NWS-"
    app, sink = make_app(app_config, tmp_path, TORNADO_WARNING, second)

    asyncio.run(app.run())

    times = [at for _, _, at in sink.calls]
    assert len(times) >= 3
    assert all(b - a >= 20.0 for a, b in zip(times, times[1:]))
    assert app.get_status()["delivery"]["messages"] == 2


def test_handle_event_returns_result(app_config, tmp_path):
    app, sink = make_app(app_config, tmp_path)

    async def handle():
        await app.initialize()
        result = await app.handle_event(parse_decoder_line(TORNADO_WARNING))
        end = await app.handle_event(parse_decoder_line("NNNN"))
        await app.shutdown()
        return result, end

    result, end = asyncio.run(handle())

    assert result.stage == ProcessingStage.DELIVERED
    assert end is None


def test_bad_location_dataset_refuses_to_start(tmp_path):
    bad = tmp_path / "codes.csv"
    bad.write_text("not,a,code\n", encoding="utf-8")
    config = AppConfig(locations_file=bad, mesh={"port": "/dev/ttyUSB0"})
    app, sink = make_app(config, tmp_path, TORNADO_WARNING)

    with pytest.raises(ConfigurationError):
        asyncio.run(app.run())

    assert sink.calls == []


def test_status_before_start(app_config):
    status = AlerterApplication(app_config).get_status()

    assert status["running"] is False
    assert status["locations_loaded"] == 0
    assert status["alert_channel"] == 0
    assert status["test_channel"] is None
