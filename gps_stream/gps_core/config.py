"""Typed configuration for the GPS stream decoder."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from gps_stream.core.config_loader import ConfigLoader
from gps_stream.core.logging_utils import get_module_logger

from .constants import (
    DEFAULT_BAUD_RATE,
    DEFAULT_BUFFER_SIZE,
    DEFAULT_IDLE_MS,
    DEFAULT_PROCESS_INTERVAL,
    DEFAULT_RECONNECT_DELAY,
    DEFAULT_SERIAL_PORT,
)
from .parsers.nmea_grammar import SentenceType

logger = get_module_logger("GPSStreamConfig")

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.txt"

DEFAULTS: Dict[str, Any] = {
    # Decoder
    "enabled_sentences": "GGA,RMC,VTG,ZDA",
    "buffer_size": DEFAULT_BUFFER_SIZE,
    "idle_ms": DEFAULT_IDLE_MS,
    "validate_checksums": True,
    "debug_tee": False,

    # Serial byte source
    "serial_port": DEFAULT_SERIAL_PORT,
    "baud_rate": DEFAULT_BAUD_RATE,
    "reconnect_delay_s": DEFAULT_RECONNECT_DELAY,
    "process_interval_s": DEFAULT_PROCESS_INTERVAL,

    # Logging
    "log_level": "info",
    "log_file": "",
}


def parse_sentence_list(value: Any) -> Tuple[SentenceType, ...]:
    """Parse ``"GGA,RMC"`` (or an iterable of names) into SentenceTypes.

    Raises:
        ValueError: On an unknown name or an empty selection.
    """
    if isinstance(value, str):
        names = [part for part in value.replace(" ", ",").split(",") if part]
    else:
        names = list(value)
    types = tuple(dict.fromkeys(
        name if isinstance(name, SentenceType) else SentenceType.parse(name)
        for name in names
    ))
    if not types:
        raise ValueError("At least one sentence type must be enabled")
    return types


@dataclass(slots=True)
class GPSStreamConfig:
    """Typed configuration for the decoder and its serial byte source."""

    # Decoder
    enabled_sentences: Tuple[SentenceType, ...] = field(
        default_factory=lambda: tuple(SentenceType)
    )
    buffer_size: int = DEFAULT_BUFFER_SIZE
    idle_ms: int = DEFAULT_IDLE_MS
    validate_checksums: bool = True
    debug_tee: bool = False

    # Serial byte source
    serial_port: str = DEFAULT_SERIAL_PORT
    baud_rate: int = DEFAULT_BAUD_RATE
    reconnect_delay_s: float = DEFAULT_RECONNECT_DELAY
    process_interval_s: float = DEFAULT_PROCESS_INTERVAL

    # Logging
    log_level: str = "info"
    log_file: Optional[Path] = None

    def __post_init__(self) -> None:
        self.enabled_sentences = parse_sentence_list(self.enabled_sentences)
        if self.buffer_size < 2:
            raise ValueError(f"buffer_size must be at least 2 (got {self.buffer_size})")
        if self.idle_ms < 0:
            raise ValueError(f"idle_ms must be non-negative (got {self.idle_ms})")
        if self.baud_rate <= 0:
            raise ValueError(f"baud_rate must be positive (got {self.baud_rate})")
        if self.process_interval_s <= 0:
            raise ValueError(
                f"process_interval_s must be positive (got {self.process_interval_s})"
            )
        if self.log_file is not None and not isinstance(self.log_file, Path):
            self.log_file = Path(self.log_file) if str(self.log_file) else None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "GPSStreamConfig":
        """Build config from a loaded ``key = value`` mapping; unknown keys are ignored."""
        merged = {**DEFAULTS, **values}
        return cls(
            enabled_sentences=parse_sentence_list(merged["enabled_sentences"]),
            buffer_size=int(merged["buffer_size"]),
            idle_ms=int(merged["idle_ms"]),
            validate_checksums=bool(merged["validate_checksums"]),
            debug_tee=bool(merged["debug_tee"]),
            serial_port=str(merged["serial_port"]),
            baud_rate=int(merged["baud_rate"]),
            reconnect_delay_s=float(merged["reconnect_delay_s"]),
            process_interval_s=float(merged["process_interval_s"]),
            log_level=str(merged["log_level"]),
            log_file=Path(merged["log_file"]) if merged["log_file"] else None,
        )

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "GPSStreamConfig":
        """Load ``config.txt`` with defaults applied.

        Args:
            config_path: Path to the config file. If None, uses the packaged default.
        """
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH
        logger.debug("Loading GPS stream config from: %s", config_path)
        return cls.from_mapping(ConfigLoader.load(Path(config_path), defaults=DEFAULTS))

    def apply_args(self, args: Any) -> "GPSStreamConfig":
        """Apply CLI argument overrides; attributes that are None are skipped."""
        arg_mappings = {
            "sentences": "enabled_sentences",
            "buffer_size": "buffer_size",
            "idle_ms": "idle_ms",
            "validate_checksums": "validate_checksums",
            "tee": "debug_tee",
            "port": "serial_port",
            "baud": "baud_rate",
            "process_interval": "process_interval_s",
            "log_level": "log_level",
            "log_file": "log_file",
        }

        overrides = {}
        for arg_name, config_key in arg_mappings.items():
            val = getattr(args, arg_name, None)
            if val is not None:
                overrides[config_key] = val

        return replace(self, **overrides)

    @property
    def idle_s(self) -> float:
        return self.idle_ms / 1000.0

    def decoder_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``NMEADecoder``."""
        return {
            "enabled": self.enabled_sentences,
            "buffer_size": self.buffer_size,
            "idle_s": self.idle_s,
            "validate_checksums": self.validate_checksums,
        }

    def to_dict(self) -> dict[str, Any]:
        """Export config values as dictionary."""
        values = asdict(self)
        values["enabled_sentences"] = ",".join(t.value for t in self.enabled_sentences)
        values["log_file"] = str(self.log_file) if self.log_file else ""
        return values


__all__ = ["GPSStreamConfig", "DEFAULTS", "DEFAULT_CONFIG_PATH", "parse_sentence_list"]
