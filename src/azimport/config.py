"""Run configuration: a resource-group scope or a single-resource scope."""

from dataclasses import dataclass, field

from azimport.errors import ConfigValidationError
from azimport.models import Scope
from azimport.resmap import ResourceMapping, is_valid_address

PLACEHOLDER = "*"
DEFAULT_PATTERN = "res-"
LOCAL_BACKEND = "local"


@dataclass(frozen=True)
class NamePattern:
    """Template used to synthesize names for resources without a mapping.

    The counter replaces the single ``*`` placeholder, or is appended when the
    template has none.
    """

    template: str = DEFAULT_PATTERN

    def __post_init__(self):
        if self.template.count(PLACEHOLDER) > 1:
            raise ConfigValidationError(
                f"Name pattern {self.template!r} has more than one {PLACEHOLDER!r} placeholder"
            )

    def render(self, counter: int) -> str:
        if PLACEHOLDER in self.template:
            return self.template.replace(PLACEHOLDER, str(counter))
        return f"{self.template}{counter}"


@dataclass(frozen=True)
class CommonConfig:
    """Settings shared by both scopes."""

    subscription_id: str
    output_dir: str = "."
    overwrite: bool = False
    append: bool = False
    batch_mode: bool = False
    continue_on_error: bool = False
    backend_type: str = LOCAL_BACKEND
    backend_config: tuple[str, ...] = ()
    dev_provider: bool = False
    logfile: str | None = None

    def backend_settings(self) -> dict[str, str]:
        """Parse ``backend_config`` entries into an ordered dict."""
        settings = {}
        for entry in self.backend_config:
            key, sep, value = entry.partition("=")
            if not sep or not key.strip():
                raise ConfigValidationError(
                    f"Invalid backend config {entry!r} (expected KEY=VALUE)"
                )
            settings[key.strip()] = value.strip()
        return settings

    def validate(self, *, require_subscription: bool = True) -> None:
        """Check the flag combinations.

        The subscription is checked only with ``require_subscription``, so the
        flags can be validated before the subscription is discovered.
        """
        if require_subscription and not self.subscription_id:
            raise ConfigValidationError("subscription id is not specified")
        if self.continue_on_error and not self.batch_mode:
            raise ConfigValidationError("continue on error is only supported in batch mode")
        if self.overwrite and self.append:
            raise ConfigValidationError("overwrite and append cannot be used together")
        if not self.backend_type:
            raise ConfigValidationError("backend type must not be empty")
        self.backend_settings()


@dataclass(frozen=True)
class RgConfig:
    """Import every resource in a resource group."""

    common: CommonConfig
    resource_group_name: str
    resource_name_pattern: NamePattern = field(default_factory=NamePattern)
    resource_mapping: ResourceMapping | None = None
    mock_client: bool = False

    scope = Scope.RESOURCE_GROUP

    def validate(self, *, require_subscription: bool = True) -> None:
        self.common.validate(require_subscription=require_subscription)
        if not self.resource_group_name:
            raise ConfigValidationError("resource group name is not specified")
        if self.common.batch_mode and self.resource_mapping is None:
            raise ConfigValidationError("batch mode requires a resource mapping file")


@dataclass(frozen=True)
class ResConfig:
    """Import a single resource under a fixed Terraform address."""

    common: CommonConfig
    resource_id: str
    resource_name: str

    scope = Scope.RESOURCE

    def validate(self, *, require_subscription: bool = True) -> None:
        self.common.validate(require_subscription=require_subscription)
        if not self.resource_id:
            raise ConfigValidationError("resource id is not specified")
        if not is_valid_address(self.resource_name):
            raise ConfigValidationError(
                f"Invalid Terraform address {self.resource_name!r} "
                "(expected '<resource type>.<name>')"
            )


Config = RgConfig | ResConfig


def validate_config(cfg: Config) -> Config:
    """Validate ``cfg`` and return it unchanged."""
    if not isinstance(cfg, (RgConfig, ResConfig)):
        raise ConfigValidationError(f"Unsupported config type: {type(cfg).__name__}")
    cfg.validate()
    return cfg
