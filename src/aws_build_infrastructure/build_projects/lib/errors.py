from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict

CACHE_CONFLICT_FIELDS = ("cache_bucket", "cache_modes")
# the wording predates the snake_case field names, but existing callers match on it
CACHE_CONFLICT_MESSAGE = "At most one of props.cacheBucket or props.cacheMode is allowed."
STRING_BUILD_SPEC_WITH_ASSET_FIELDS = ("build_spec", "build_script_asset")
STRING_BUILD_SPEC_WITH_ASSET_MESSAGE = (
    "Cannot extend buildspec that is given as a string. Pass the buildspec as a structure instead."
)
MISSING_BUILD_SPEC_MESSAGE = "If the Project's source is NoSource, you need to provide a buildspec"
MISSING_BUILD_SCRIPT_ASSET_MESSAGE = "A build_script_entrypoint was given without a build_script_asset to run it from."
UNEXTENDABLE_BUILD_SPEC_MESSAGE = (
    "Cannot extend buildspec: phases must be a mapping of phase names to mappings whose commands are a list."
)
UNSERIALIZABLE_BUILD_SPEC_MESSAGE = "The buildspec must only contain values that can be serialized to JSON."


class ProjectConfigError(BaseModel):
    """A configuration problem detected while constructing a project, returned as a value rather than raised."""

    kind: str
    field_names: tuple[str, ...]
    message: str

    model_config = ConfigDict(frozen=True)


class ConfigurationConflict(ProjectConfigError):
    kind: Literal["configuration_conflict"] = "configuration_conflict"


class MissingConfiguration(ProjectConfigError):
    kind: Literal["missing_configuration"] = "missing_configuration"


class InvalidConfiguration(ProjectConfigError):
    kind: Literal["invalid_configuration"] = "invalid_configuration"


class ProjectConfigurationError(Exception):
    def __init__(self, *, project_name: str, error: ProjectConfigError):
        super().__init__(error.message)
        self.project_name = project_name
        self.error = error
