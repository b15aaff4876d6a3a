from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Mapping, Optional

from ..domain.link import PROBE_TIMEOUT_MS, SEND_TIMEOUT_MS, parse_port
from ..utils.logging import env_requests_debug


@dataclass
class SettingsConfig:
    """Typed runtime settings that persist via StorageLocal."""

    send_timeout_ms: int = SEND_TIMEOUT_MS
    probe_timeout_ms: int = PROBE_TIMEOUT_MS
    last_port: str = ""


def _default_debug_logging() -> bool:
    return env_requests_debug()


class SettingsVM:
    """Keeps link settings state and validation, no I/O here."""

    def __init__(
        self,
        *,
        config: Optional[SettingsConfig] = None,
        on_save: Optional[Callable[[dict], None]] = None,
    ) -> None:
        self.config = config or SettingsConfig()
        self.on_save = on_save
        self.debug_logging: bool = _default_debug_logging()

    # ------------------------------------------------------------------
    # Properties bridging to the typed config
    # ------------------------------------------------------------------
    @property
    def send_timeout_ms(self) -> int:
        return self.config.send_timeout_ms

    @send_timeout_ms.setter
    def send_timeout_ms(self, value: int) -> None:
        self.config = replace(self.config, send_timeout_ms=self._coerce_timeout("send_timeout_ms", value))

    @property
    def probe_timeout_ms(self) -> int:
        return self.config.probe_timeout_ms

    @probe_timeout_ms.setter
    def probe_timeout_ms(self, value: int) -> None:
        coerced = self._coerce_timeout("probe_timeout_ms", value)
        self.config = replace(self.config, probe_timeout_ms=coerced)

    @property
    def last_port(self) -> str:
        return self.config.last_port

    @last_port.setter
    def last_port(self, value: Any) -> None:
        self.config = replace(self.config, last_port=self._coerce_port(value))

    # ------------------------------------------------------------------
    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply persisted settings to the view-model."""

        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        allowed_keys = {*SettingsConfig.__annotations__.keys(), "debug_logging"}
        unknown = set(payload.keys()) - allowed_keys
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        updates = {}
        for cfg_key in SettingsConfig.__annotations__.keys():
            if cfg_key in payload:
                updates[cfg_key] = self._coerce_config_value(cfg_key, payload[cfg_key])

        if updates:
            self.config = replace(self.config, **updates)

        if "debug_logging" in payload:
            self.debug_logging = self._coerce_bool(payload["debug_logging"])

    def to_dict(self) -> dict:
        snapshot = asdict(self.config)
        snapshot["debug_logging"] = bool(self.debug_logging)
        return snapshot

    def set_debug_logging(self, enabled: bool) -> None:
        self.debug_logging = self._coerce_bool(enabled)

    def remember_port(self, port: Any) -> None:
        """Record the port the backend last answered on and persist it."""
        coerced = self._coerce_port(port)
        if coerced == self.last_port:
            return
        self.last_port = coerced
        self.cmd_save()

    def cmd_save(self) -> None:
        if self.on_save:
            self.on_save(self.to_dict())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _coerce_config_value(self, key: str, raw: Any) -> Any:
        if key in {"send_timeout_ms", "probe_timeout_ms"}:
            return self._coerce_timeout(key, raw)
        if key == "last_port":
            return self._coerce_port(raw)
        raise ValueError(f"Unhandled config field: {key}")

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    @staticmethod
    def _coerce_timeout(name: str, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be an integer.")
        if isinstance(value, (int, float)):
            coerced = int(value)
        elif isinstance(value, str):
            try:
                coerced = int(value.strip())
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name} must be an integer.") from exc
        else:
            raise ValueError(f"{name} must be an integer.")
        if coerced <= 0:
            raise ValueError(f"{name} must be positive.")
        return coerced

    @staticmethod
    def _coerce_port(value: Any) -> str:
        if value is None:
            return ""
        text = str(value).strip()
        if not text:
            return ""
        return str(parse_port(text))


def default_settings_payload() -> dict:
    """Return a fresh snapshot containing the default settings payload."""
    return SettingsVM().to_dict()
