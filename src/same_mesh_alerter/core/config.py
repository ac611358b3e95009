"""
Configuration management for SAME Mesh Alerter.
"""

from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type
from pydantic import BaseModel, Field, model_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict
from ruamel.yaml import YAML

# YAML document being loaded by AppConfig.from_yaml
_yaml_data: ContextVar[Optional[Dict[str, Any]]] = ContextVar("_yaml_data", default=None)


class ConfigurationError(Exception):
    """Configuration error that prevents the alerter from starting."""

    pass


class MeshConfig(BaseModel):
    """Meshtastic transport configuration."""

    backend: str = Field("cli", description="Transport backend: 'cli' (meshtastic command) or 'api' (Python library)")
    port: Optional[str] = Field(None, description="Serial port of the radio (e.g., /dev/ttyUSB0)")
    host: Optional[str] = Field(None, description="Network address of the radio (host or host:port)")
    alert_channel: int = Field(0, ge=0, le=7, description="Channel alerts are sent to")
    test_channel: Optional[int] = Field(None, ge=0, le=7, description="Channel tests are sent to (None ignores tests)")
    cli_path: str = Field("meshtastic", description="Path to the meshtastic command-line tool")
    command_timeout: int = Field(60, description="Timeout for one meshtastic CLI invocation in seconds")
    want_ack: bool = Field(True, description="Request acknowledgment from the mesh")

    @model_validator(mode="after")
    def _check_connection(self) -> "MeshConfig":
        if self.port and self.host:
            raise ValueError("port and host are mutually exclusive")
        if self.backend not in ("cli", "api"):
            raise ValueError(f"unknown mesh backend: {self.backend}")
        return self


class DecoderConfig(BaseModel):
    """External SAME decoder configuration."""

    command: List[str] = Field(
        default_factory=lambda: ["samedec", "-r", "{rate}"],
        description="Decoder command; '{rate}' is replaced with the sample rate",
    )
    sample_rate: int = Field(48000, description="Audio sample rate in Hz passed to the decoder")


class DeliveryConfig(BaseModel):
    """Message chunking, rate limiting and retry configuration."""

    fragment_bytes: int = Field(75, gt=0, description="Maximum bytes per mesh message fragment")
    min_interval_seconds: float = Field(20.0, ge=0, description="Minimum time between mesh sends")
    max_retries: int = Field(3, ge=0, description="Retries after the first failed attempt")
    retry_delay_seconds: float = Field(5.0, ge=0, description="Delay between attempts in seconds")
    overflow_policy: str = Field("split", description="'split' into fragments or 'truncate' to max_message_bytes")
    max_message_bytes: int = Field(228, gt=0, description="Payload limit used by the truncate policy")

    @model_validator(mode="after")
    def _check_policy(self) -> "DeliveryConfig":
        if self.overflow_policy not in ("split", "truncate"):
            raise ValueError(f"unknown overflow policy: {self.overflow_policy}")
        return self


class FilteringConfig(BaseModel):
    """Alert filtering configuration."""

    locations: List[str] = Field(
        default_factory=list,
        description="SAME location codes of interest; alerts matching none are dropped",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field("INFO", description="Log level")
    file: Optional[Path] = Field(None, description="Log file path")
    format: str = Field("text", description="Log format: 'json' or 'text'")


class YamlSettingsSource(PydanticBaseSettingsSource):
    """
    Settings taken from an already-parsed YAML document.

    The radio connection is one setting: a port or host given by a higher
    priority source replaces both ``mesh.port`` and ``mesh.host`` from the file.
    """

    def __init__(
        self,
        settings_cls: Type[BaseSettings],
        data: Dict[str, Any],
        overrides: Tuple[PydanticBaseSettingsSource, ...] = (),
    ):
        super().__init__(settings_cls)
        self.data = data
        self.overrides = overrides

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        return self.data.get(field_name), field_name, False

    def __call__(self) -> Dict[str, Any]:
        data = {
            name: value for name, value in self.data.items()
            if name in self.settings_cls.model_fields and value is not None
        }

        mesh = data.get("mesh")
        if isinstance(mesh, dict) and self._connection_overridden():
            data["mesh"] = {k: v for k, v in mesh.items() if k not in ("port", "host")}
        return data

    def _connection_overridden(self) -> bool:
        for source in self.overrides:
            mesh = source().get("mesh")
            if isinstance(mesh, dict) and (mesh.get("port") or mesh.get("host")):
                return True
        return False


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SAME_MESH_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    locations_file: Optional[Path] = Field(None, description="Location dataset override (defaults to bundled CSV)")
    icons: Dict[str, str] = Field(default_factory=dict, description="Per-significance message prefix overrides")

    mesh: MeshConfig = Field(default_factory=MeshConfig)
    decoder: DecoderConfig = Field(default_factory=DecoderConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)
    filtering: FilteringConfig = Field(default_factory=FilteringConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats the YAML file; nested sections are merged key by key
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls, _yaml_data.get() or {}, (env_settings, dotenv_settings)),
            file_secret_settings,
        )

    @classmethod
    def from_yaml(cls, config_path=None) -> "AppConfig":
        """
        Load configuration from YAML file.

        Values from ``SAME_MESH_*`` environment variables take precedence
        over the file.
        """
        if config_path is None:
            config_path = Path("config/default.yaml")
        elif isinstance(config_path, str):
            config_path = Path(config_path)

        if not config_path.exists():
            # Return default config if file doesn't exist
            return cls()

        yaml = YAML(typ='safe')
        with open(config_path, 'r') as f:
            yaml_data = yaml.load(f) or {}

        token = _yaml_data.set(yaml_data)
        try:
            return cls()
        finally:
            _yaml_data.reset(token)
