import copy
import json
import logging
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from troposphere import codebuild

from aws_build_infrastructure.templates.lib import LogicalId
from aws_build_infrastructure.templates.lib import TemplateValue
from aws_build_infrastructure.templates.lib import ZipDirectoryAsset

from .cache import CacheMode
from .cache import ResolvedCache
from .cache import render_cache
from .cache import resolve_cache
from .environment import DEFAULT_BUILD_SCRIPT_ENTRYPOINT
from .environment import S3_BUCKET_ENV
from .environment import S3_KEY_ENV
from .environment import BuildEnvironment
from .environment import EnvironmentVariable
from .environment import render_environment
from .environment import run_script_build_spec
from .errors import CACHE_CONFLICT_FIELDS
from .errors import CACHE_CONFLICT_MESSAGE
from .errors import MISSING_BUILD_SCRIPT_ASSET_MESSAGE
from .errors import MISSING_BUILD_SPEC_MESSAGE
from .errors import STRING_BUILD_SPEC_WITH_ASSET_FIELDS
from .errors import STRING_BUILD_SPEC_WITH_ASSET_MESSAGE
from .errors import UNEXTENDABLE_BUILD_SPEC_MESSAGE
from .errors import UNSERIALIZABLE_BUILD_SPEC_MESSAGE
from .errors import ConfigurationConflict
from .errors import InvalidConfiguration
from .errors import MissingConfiguration
from .errors import ProjectConfigError
from .sources import NoSource
from .sources import ProjectSource
from .sources import render_artifacts
from .sources import render_source
from .sources import render_triggers

logger = logging.getLogger(__name__)

type BuildSpec = dict[str, Any] | str  # either an inline buildspec document or the name of a buildspec file in the source


class ProjectConfig(BaseModel):
    name: str  # construct id, used to derive the logical ids within the template
    project_name: str | None = None
    description: str | None = None
    source: ProjectSource = Field(default_factory=NoSource)
    build_spec: BuildSpec | None = None
    build_script_asset: ZipDirectoryAsset | None = None
    build_script_entrypoint: str | None = None  # relative to the root of the asset, defaults to build.sh
    environment: BuildEnvironment = Field(default_factory=BuildEnvironment)
    environment_variables: dict[str, EnvironmentVariable] = Field(default_factory=dict)
    cache_bucket: TemplateValue | None = None
    cache_dir: str | None = None
    cache_modes: list[CacheMode] | None = None
    timeout_in_minutes: int | None = Field(default=None, ge=5, le=480)
    badge: bool | None = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def add_cache_mode(self, mode: CacheMode) -> None:
        if self.cache_modes is None:
            self.cache_modes = []
        self.cache_modes.append(mode)

    def add_environment_variable(self, name: str, variable: EnvironmentVariable) -> None:
        self.environment_variables[name] = variable


class ValidatedProject(BaseModel):
    """A project configuration with every default resolved, ready to be rendered."""

    name: str
    project_name: str | None
    description: str | None
    source: ProjectSource
    build_spec: BuildSpec | None
    build_script_asset: ZipDirectoryAsset | None
    environment: BuildEnvironment
    environment_variables: dict[str, EnvironmentVariable]
    cache: ResolvedCache
    timeout_in_minutes: int | None
    badge: bool | None

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)


def can_extend_build_spec(build_spec: dict[str, Any], extension: dict[str, Any]) -> bool:
    """Whether every phase the extension appends to is either absent or a mapping with a list of commands."""
    if "phases" not in build_spec:
        return True
    phases = build_spec["phases"]
    if not isinstance(phases, dict):
        return False
    for phase_name in extension["phases"]:
        if phase_name not in phases:
            continue
        phase = phases[phase_name]
        if not isinstance(phase, dict):
            return False
        if "commands" in phase and not isinstance(phase["commands"], list):
            return False
    return True


def extend_build_spec(build_spec: dict[str, Any], extension: dict[str, Any]) -> dict[str, Any]:
    """Merge the extension into a copy of the buildspec, appending the commands of each phase."""
    extended = copy.deepcopy(build_spec)
    if "version" not in extended:
        extended["version"] = extension["version"]
    phases = extended.setdefault("phases", {})
    for phase_name, phase in extension["phases"].items():
        commands = phases.setdefault(phase_name, {}).setdefault("commands", [])
        commands.extend(phase["commands"])
    return extended


def construct_project(config: ProjectConfig) -> ValidatedProject | ProjectConfigError:  # noqa: PLR0911 # one return per configuration problem
    if config.cache_bucket is not None and config.cache_modes is not None:
        return ConfigurationConflict(field_names=CACHE_CONFLICT_FIELDS, message=CACHE_CONFLICT_MESSAGE)
    if config.build_script_entrypoint is not None and config.build_script_asset is None:
        return MissingConfiguration(field_names=("build_script_asset",), message=MISSING_BUILD_SCRIPT_ASSET_MESSAGE)

    build_spec = config.build_spec
    environment_variables = dict(config.environment_variables)
    asset = config.build_script_asset
    if asset is not None:
        if isinstance(build_spec, str):
            return ConfigurationConflict(
                field_names=STRING_BUILD_SPEC_WITH_ASSET_FIELDS, message=STRING_BUILD_SPEC_WITH_ASSET_MESSAGE
            )
        extension = run_script_build_spec(config.build_script_entrypoint or DEFAULT_BUILD_SCRIPT_ENTRYPOINT)
        if not can_extend_build_spec(build_spec or {}, extension):
            return InvalidConfiguration(field_names=("build_spec",), message=UNEXTENDABLE_BUILD_SPEC_MESSAGE)
        build_spec = extend_build_spec(build_spec or {}, extension)
        environment_variables[S3_BUCKET_ENV] = EnvironmentVariable(value=asset.s3_bucket_name)
        environment_variables[S3_KEY_ENV] = EnvironmentVariable(value=asset.s3_object_key)
    if not build_spec:
        build_spec = None

    if isinstance(config.source, NoSource) and build_spec is None:
        return MissingConfiguration(field_names=("build_spec",), message=MISSING_BUILD_SPEC_MESSAGE)
    if build_spec is not None:
        try:
            _ = render_build_spec(build_spec)
        except (TypeError, ValueError):
            logger.debug(f"Buildspec of project {config.name} can't be serialized", exc_info=True)
            return InvalidConfiguration(field_names=("build_spec",), message=UNSERIALIZABLE_BUILD_SPEC_MESSAGE)

    return ValidatedProject(
        name=config.name,
        project_name=config.project_name,
        description=config.description,
        source=config.source,
        build_spec=build_spec,
        build_script_asset=asset,
        environment=config.environment,
        environment_variables=environment_variables,
        cache=resolve_cache(
            cache_bucket=config.cache_bucket, cache_dir=config.cache_dir, cache_modes=config.cache_modes
        ),
        timeout_in_minutes=config.timeout_in_minutes,
        badge=config.badge,
    )


def render_build_spec(build_spec: BuildSpec) -> str:
    if isinstance(build_spec, str):
        return build_spec
    return json.dumps(build_spec, indent=2, ensure_ascii=False)


def project_resource(
    project: ValidatedProject, *, service_role: TemplateValue, logical_id: LogicalId | None = None
) -> codebuild.Project:
    source = render_source(project.source)
    if project.build_spec is not None:
        source.BuildSpec = render_build_spec(project.build_spec)

    optional: dict[str, Any] = {}
    if project.project_name is not None:
        optional["Name"] = project.project_name
    if project.description is not None:
        optional["Description"] = project.description
    cache = render_cache(project.cache)
    if cache is not None:
        optional["Cache"] = cache
    if project.timeout_in_minutes is not None:
        optional["TimeoutInMinutes"] = project.timeout_in_minutes
    if project.badge is not None:
        optional["BadgeEnabled"] = project.badge
    triggers = render_triggers(project.source)
    if triggers is not None:
        optional["Triggers"] = triggers

    logger.debug(f"Rendered project {project.name} with source type {project.source.type}")
    return codebuild.Project(
        logical_id,
        Source=source,
        Artifacts=render_artifacts(project.source),
        ServiceRole=service_role,
        Environment=render_environment(project.environment, project.environment_variables),
        **optional,
    )


def render_project(project: ValidatedProject, *, service_role: TemplateValue) -> dict[str, Any]:
    """Render the CloudFormation description of the project; every call returns a freshly built mapping."""
    return project_resource(project, service_role=service_role).to_dict()
