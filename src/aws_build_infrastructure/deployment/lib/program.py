import logging

from ephemeral_pulumi_deploy import get_config_str
from troposphere import Output

from aws_build_infrastructure.artifact_stores.container_registries import define_container_registries
from aws_build_infrastructure.artifact_stores.lib import ContainerRepository
from aws_build_infrastructure.artifact_stores.lib import RepositoryConfig
from aws_build_infrastructure.build_projects.lib import BuildProject
from aws_build_infrastructure.build_projects.lib import ProjectConfig
from aws_build_infrastructure.build_projects.projects import define_build_projects
from aws_build_infrastructure.templates.lib import TemplateStack
from aws_build_infrastructure.templates.lib import make_logical_id

from .template_deployment import TemplateDeployment
from .template_deployment import get_asset_bucket_name

logger = logging.getLogger(__name__)

STACK_DESCRIPTION = "Build projects and the container registries they publish to"


def populate_template_stack(
    *, stack: TemplateStack, project_configs: list[ProjectConfig], registry_configs: list[RepositoryConfig]
) -> None:
    for registry_config in registry_configs:
        repository = ContainerRepository(stack, config=registry_config)
        stack.add_output(
            Output(
                make_logical_id(f"{registry_config.name}RepositoryUri"),
                Value=repository.repository_uri,
                Description=f"URI of the {registry_config.name} container repository",
            )
        )
    for project_config in project_configs:
        _ = BuildProject(stack, config=project_config)


def pulumi_program() -> None:
    """Execute creating the stack."""
    # assets get registered against the template stack while the projects are defined, so it has to exist first
    stack = TemplateStack(get_config_str("proj:template_stack_name"), description=STACK_DESCRIPTION)
    project_configs: list[ProjectConfig] = []
    define_build_projects(project_configs, stack)
    registry_configs: list[RepositoryConfig] = []
    define_container_registries(registry_configs)
    logger.info(
        f"Defining {len(project_configs)} build projects and {len(registry_configs)} container registries in {stack.name}"
    )
    populate_template_stack(stack=stack, project_configs=project_configs, registry_configs=registry_configs)
    _ = TemplateDeployment(stack=stack, asset_bucket_name=get_asset_bucket_name() if stack.assets else None)
