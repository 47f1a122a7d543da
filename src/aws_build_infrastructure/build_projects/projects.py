from aws_build_infrastructure.templates.lib import TemplateStack

from .lib import ProjectConfig


def define_build_projects(configs: list[ProjectConfig], stack: TemplateStack):  # noqa: ARG001 # the stack is passed in so assets can be registered against it
    """Create the configurations for the build projects.

    Example:
    configs.append(
        ProjectConfig(
            name="BackendTests",
            source=GitHubSource(owner="my-org", repo="backend", webhook=True),
            build_spec="buildspec.yml",
            cache_modes=[CacheMode.DOCKER_LAYER_CACHE],
        )
    )

    Or running a local script directory:
    configs.append(
        ProjectConfig(
            name="Nightly",
            build_script_asset=ZipDirectoryAsset(stack, "NightlyScripts", path="scripts/nightly"),
            build_script_entrypoint="run.sh",
        )
    )
    """
    # Append build projects to the list here
