"""Typed configuration for the controller."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from thermo_reader.core.config_manager import ConfigManager
from thermo_reader.core.logging_config import LOG_LEVELS

from .types import ExitPolicy, Thresholds

DEFAULT_ADVISORY = ("AVERTISSEMENT!!!", "VEUILLEZ CALIBRER", "POUR REFROIDIR.")
DEFAULT_ERROR_TEXT = "Error reading data"

# Config keys persisted when thresholds are edited remotely.
THRESHOLD_KEYS = {
    "temperature_c": "temperature_threshold_c",
    "distance_cm": "distance_threshold_cm",
    "alarm_enabled": "alarm_enabled",
}


@dataclass(slots=True)
class ControllerConfig:
    """Typed configuration for the thermo-reader controller."""

    # Initial thresholds (remotely editable at runtime)
    temperature_threshold_c: float = 15.0
    distance_threshold_cm: float = 120.0
    alarm_enabled: bool = True

    # Mode controller timing
    tick_interval_s: float = 1.0
    dwell_s: float = 7.0
    dwell_interval_s: float = 1.0
    exit_policy: str = ExitPolicy.DWELL.value

    # Alarm timing
    alarm_interval_s: float = 0.1
    pulse_on_s: float = 0.05
    pulse_period_s: float = 0.1

    # DS18B20 (empty path -> discover 28-* under /sys/bus/w1/devices)
    w1_device_path: str = ""

    # HC-SR04 (BCM numbering)
    trigger_pin: int = 23
    echo_pin: int = 24
    echo_timeout_s: float = 0.03

    # Buzzer
    buzzer_pin: int = 18
    buzzer_active_low: bool = False

    # LCD
    lcd_expander: str = "PCF8574"
    lcd_address: int = 0x27
    lcd_port: int = 1
    lcd_cols: int = 20
    lcd_rows: int = 4

    # Simulation (--simulate) base values
    sim_temperature_c: float = 18.0
    sim_distance_cm: float = 90.0

    # Display text
    advisory_lines: tuple[str, ...] = field(default_factory=lambda: DEFAULT_ADVISORY)
    error_text: str = DEFAULT_ERROR_TEXT

    # REST adapter
    api_enabled: bool = True
    api_host: str = "127.0.0.1"
    api_port: int = 8888
    persist_thresholds: bool = True

    # Runtime
    simulate: bool = False
    log_level: str = "info"
    log_file: Optional[str] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any], args: Any = None) -> "ControllerConfig":
        """Build config from parsed config-file values with optional CLI overrides."""
        d = cls()
        cm = ConfigManager

        advisory = tuple(
            cm.get_str(config, f"advisory_line_{index + 1}", line)
            for index, line in enumerate(d.advisory_lines)
        )

        result = cls(
            temperature_threshold_c=cm.get_float(config, "temperature_threshold_c", d.temperature_threshold_c),
            distance_threshold_cm=cm.get_float(config, "distance_threshold_cm", d.distance_threshold_cm),
            alarm_enabled=cm.get_bool(config, "alarm_enabled", d.alarm_enabled),
            tick_interval_s=cm.get_float(config, "tick_interval_s", d.tick_interval_s),
            dwell_s=cm.get_float(config, "dwell_s", d.dwell_s),
            dwell_interval_s=cm.get_float(config, "dwell_interval_s", d.dwell_interval_s),
            exit_policy=cm.get_str(config, "exit_policy", d.exit_policy).lower(),
            alarm_interval_s=cm.get_float(config, "alarm_interval_s", d.alarm_interval_s),
            pulse_on_s=cm.get_float(config, "pulse_on_s", d.pulse_on_s),
            pulse_period_s=cm.get_float(config, "pulse_period_s", d.pulse_period_s),
            w1_device_path=cm.get_str(config, "w1_device_path", d.w1_device_path),
            trigger_pin=cm.get_int(config, "trigger_pin", d.trigger_pin),
            echo_pin=cm.get_int(config, "echo_pin", d.echo_pin),
            echo_timeout_s=cm.get_float(config, "echo_timeout_s", d.echo_timeout_s),
            buzzer_pin=cm.get_int(config, "buzzer_pin", d.buzzer_pin),
            buzzer_active_low=cm.get_bool(config, "buzzer_active_low", d.buzzer_active_low),
            lcd_expander=cm.get_str(config, "lcd_expander", d.lcd_expander),
            lcd_address=cm.get_int(config, "lcd_address", d.lcd_address),
            lcd_port=cm.get_int(config, "lcd_port", d.lcd_port),
            lcd_cols=cm.get_int(config, "lcd_cols", d.lcd_cols),
            lcd_rows=cm.get_int(config, "lcd_rows", d.lcd_rows),
            sim_temperature_c=cm.get_float(config, "sim_temperature_c", d.sim_temperature_c),
            sim_distance_cm=cm.get_float(config, "sim_distance_cm", d.sim_distance_cm),
            advisory_lines=advisory,
            error_text=cm.get_str(config, "error_text", d.error_text),
            api_enabled=cm.get_bool(config, "api_enabled", d.api_enabled),
            api_host=cm.get_str(config, "api_host", d.api_host),
            api_port=cm.get_int(config, "api_port", d.api_port),
            persist_thresholds=cm.get_bool(config, "persist_thresholds", d.persist_thresholds),
            simulate=cm.get_bool(config, "simulate", d.simulate),
            log_level=cm.get_str(config, "log_level", d.log_level).lower(),
            log_file=config.get("log_file") or d.log_file,
        )

        if args is not None:
            result = result._apply_args_override(args)

        result.validate()
        return result

    def _apply_args_override(self, args: Any) -> "ControllerConfig":
        values = asdict(self)

        arg_mappings = {
            "log_level": "log_level",
            "log_file": "log_file",
            "exit_policy": "exit_policy",
            "api_host": "api_host",
            "api_port": "api_port",
        }

        for arg_name, config_key in arg_mappings.items():
            val = getattr(args, arg_name, None)
            if val is not None:
                values[config_key] = str(val) if config_key == "log_file" else val

        if getattr(args, "simulate", False):
            values["simulate"] = True
        if getattr(args, "no_api", False):
            values["api_enabled"] = False

        values["advisory_lines"] = tuple(values["advisory_lines"])
        return ControllerConfig(**values)

    def validate(self) -> None:
        ExitPolicy(self.exit_policy)
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(LOG_LEVELS)}")
        if self.pulse_on_s >= self.pulse_period_s:
            raise ValueError("pulse_on_s must be shorter than pulse_period_s")
        for name in ("tick_interval_s", "dwell_interval_s", "alarm_interval_s", "echo_timeout_s"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    @property
    def policy(self) -> ExitPolicy:
        return ExitPolicy(self.exit_policy)

    def initial_thresholds(self) -> Thresholds:
        return Thresholds(
            temperature_c=self.temperature_threshold_c,
            distance_cm=self.distance_threshold_cm,
            alarm_enabled=self.alarm_enabled,
        )


__all__ = ["ControllerConfig", "DEFAULT_ADVISORY", "DEFAULT_ERROR_TEXT", "THRESHOLD_KEYS"]
