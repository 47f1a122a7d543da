from .lib import RepositoryConfig


def define_container_registries(container_registries: list[RepositoryConfig]) -> None:
    """Create container registries (e.g. ECRs) alongside the build projects that push to them.

    Example:
    backend = RepositoryConfig(name="Backend", repository_name="my-project/backend")
    backend.add_lifecycle_rule(LifecycleRule(tag_status=TagStatus.UNTAGGED, max_image_age_days=14))
    backend.add_lifecycle_rule(LifecycleRule(max_image_count=50))
    container_registries.append(backend)
    """
