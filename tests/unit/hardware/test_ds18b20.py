"""Unit tests for DS18B20 w1_slave parsing and file reads."""

import pytest

from thermo_reader.control.errors import SensorError, SensorFault
from thermo_reader.hardware.ds18b20 import DS18B20Reader, discover_device_path, parse_w1_payload


class TestParse:

    def test_positive(self, w1_payload_ok):
        assert parse_w1_payload(w1_payload_ok) == pytest.approx(23.125)

    def test_negative(self):
        payload = "ff ff : crc=aa YES\nff ff t=-1250\n"
        assert parse_w1_payload(payload) == pytest.approx(-1.25)

    def test_crc_failure(self):
        payload = "72 01 : crc=57 NO\n72 01 t=23125\n"
        with pytest.raises(SensorError) as excinfo:
            parse_w1_payload(payload)
        assert excinfo.value.reason is SensorFault.PARSE_ERROR

    def test_missing_value(self):
        with pytest.raises(SensorError) as excinfo:
            parse_w1_payload("72 01 : crc=57 YES\n72 01\n")
        assert excinfo.value.reason is SensorFault.PARSE_ERROR

    def test_truncated(self):
        with pytest.raises(SensorError) as excinfo:
            parse_w1_payload("")
        assert excinfo.value.reason is SensorFault.PARSE_ERROR


class TestReader:

    @pytest.mark.asyncio
    async def test_reads_file(self, tmp_path, w1_payload_ok):
        slave = tmp_path / "w1_slave"
        slave.write_text(w1_payload_ok)

        assert await DS18B20Reader(slave).read() == pytest.approx(23.125)

    @pytest.mark.asyncio
    async def test_missing_file_is_unavailable(self, tmp_path):
        with pytest.raises(SensorError) as excinfo:
            await DS18B20Reader(tmp_path / "gone" / "w1_slave").read()
        assert excinfo.value.reason is SensorFault.UNAVAILABLE
        assert excinfo.value.sensor == "ds18b20"

    @pytest.mark.asyncio
    async def test_undecodable_payload_is_parse_error(self, tmp_path):
        slave = tmp_path / "w1_slave"
        slave.write_bytes(b"\xff\xfe\x00garbage : crc=00 YES\n\x80 t=21000\n")

        with pytest.raises(SensorError) as excinfo:
            await DS18B20Reader(slave).read()
        assert excinfo.value.reason is SensorFault.PARSE_ERROR


class TestDiscovery:

    def test_finds_first_probe(self, tmp_path, w1_payload_ok):
        for name in ("28-00000b", "28-00000a"):
            (tmp_path / name).mkdir()
            (tmp_path / name / "w1_slave").write_text(w1_payload_ok)
        (tmp_path / "w1_bus_master1").mkdir()

        assert discover_device_path(tmp_path) == tmp_path / "28-00000a" / "w1_slave"

    def test_none_when_absent(self, tmp_path):
        (tmp_path / "w1_bus_master1").mkdir()
        assert discover_device_path(tmp_path) is None
