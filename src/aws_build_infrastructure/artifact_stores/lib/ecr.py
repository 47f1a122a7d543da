import json
import logging
from enum import StrEnum
from typing import Any
from typing import override

from pydantic import BaseModel
from pydantic import Field
from troposphere import AWSHelperFn
from troposphere import AccountId
from troposphere import GetAtt
from troposphere import Join
from troposphere import Ref
from troposphere import Region
from troposphere import URLSuffix
from troposphere import ecr

from aws_build_infrastructure.templates.lib import LogicalId
from aws_build_infrastructure.templates.lib import TemplateStack
from aws_build_infrastructure.templates.lib import make_logical_id

logger = logging.getLogger(__name__)


class TagStatus(StrEnum):
    ANY = "any"
    TAGGED = "tagged"
    UNTAGGED = "untagged"


class LifecycleRule(BaseModel):
    rule_priority: int | None = Field(default=None, ge=1)
    description: str | None = None
    tag_status: TagStatus = TagStatus.ANY
    tag_prefix_list: list[str] = Field(default_factory=list)
    max_image_count: int | None = Field(default=None, ge=1)
    max_image_age_days: int | None = Field(default=None, ge=1)

    @override
    def model_post_init(self, context: Any):
        if self.tag_status == TagStatus.TAGGED and not self.tag_prefix_list:
            raise ValueError(  # noqa: TRY003 # Pydantic standard pattern utilizes ValueError for validation
                "TagStatus.Tagged requires the specification of a tag_prefix_list"
            )
        if self.tag_status != TagStatus.TAGGED and self.tag_prefix_list:
            raise ValueError(  # noqa: TRY003 # Pydantic standard pattern utilizes ValueError for validation
                "tag_prefix_list can only be specified when tag_status is set to Tagged"
            )
        if (self.max_image_count is None) == (self.max_image_age_days is None):
            raise ValueError(  # noqa: TRY003 # Pydantic standard pattern utilizes ValueError for validation
                f"Lifecycle rule must contain exactly one of max_image_age_days and max_image_count, got: {self.model_dump(exclude_defaults=True)}"
            )


class LifecycleRuleError(ValueError):
    def __init__(self, *, repository: str, reason: str):
        super().__init__(f"Invalid lifecycle rules for repository {repository}: {reason}")


def resolve_lifecycle_rules(rules: list[LifecycleRule], *, repository: str) -> list[tuple[int, LifecycleRule]]:
    """Assign a priority to every rule, in the order they will appear in the policy.

    Explicitly prioritized rules come first, then the unprioritized ones numbered upwards from the highest
    explicit priority, and the TagStatus.Any rule always last since ECR requires it to have the highest priority.
    """
    prioritized = [rule for rule in rules if rule.rule_priority is not None and rule.tag_status != TagStatus.ANY]
    auto_prioritized = [rule for rule in rules if rule.rule_priority is None and rule.tag_status != TagStatus.ANY]
    any_rules = [rule for rule in rules if rule.tag_status == TagStatus.ANY]
    if len(any_rules) > 1:
        raise LifecycleRuleError(repository=repository, reason="Life cycle can only have one TagStatus.Any rule")
    if any_rules and any_rules[0].rule_priority is not None and auto_prioritized:
        raise LifecycleRuleError(
            repository=repository,
            reason="Cannot combine prioritized TagStatus.Any rule with unprioritized rules. Remove rule_priority from the TagStatus.Any rule.",
        )

    next_priority = max((rule.rule_priority for rule in prioritized if rule.rule_priority is not None), default=0) + 1
    resolved: list[tuple[int, LifecycleRule]] = []
    for rule in [*prioritized, *auto_prioritized, *any_rules]:
        if rule.rule_priority is not None:
            resolved.append((rule.rule_priority, rule))
        else:
            resolved.append((next_priority, rule))
            next_priority += 1

    priorities = [priority for priority, _ in resolved]
    duplicates = sorted({priority for priority in priorities if priorities.count(priority) > 1})
    if duplicates:
        raise LifecycleRuleError(repository=repository, reason=f"Duplicate rule priorities: {duplicates}")
    if any_rules and len(resolved) > 1:
        any_priority = resolved[-1][0]
        highest_other = max(priorities[:-1])
        if any_priority < highest_other:
            raise LifecycleRuleError(
                repository=repository,
                reason=f"TagStatus.Any rule must have highest priority, has {any_priority} which is smaller than {highest_other}",
            )
    return resolved


class RepositoryConfig(BaseModel):
    name: str  # construct id, used to derive the logical ids within the template
    repository_name: str | None = None
    lifecycle_registry_id: str | None = None
    retain: bool = False  # keep the repository (and its images) when the stack is deleted
    lifecycle_rules: list[LifecycleRule] = Field(default_factory=list)

    @override
    def model_post_init(self, context: Any):
        _ = resolve_lifecycle_rules(self.lifecycle_rules, repository=self.name)

    def add_lifecycle_rule(self, rule: LifecycleRule) -> None:
        _ = resolve_lifecycle_rules([*self.lifecycle_rules, rule], repository=self.name)
        self.lifecycle_rules.append(rule)


def add_lifecycle_rule(config: RepositoryConfig, rule: LifecycleRule) -> None:
    config.add_lifecycle_rule(rule)


def render_lifecycle_rule(priority: int, rule: LifecycleRule) -> dict[str, Any]:
    selection: dict[str, Any] = {"tagStatus": str(rule.tag_status)}
    if rule.tag_prefix_list:
        selection["tagPrefixList"] = list(rule.tag_prefix_list)
    if rule.max_image_age_days is not None:
        selection["countType"] = "sinceImagePushed"
        selection["countNumber"] = rule.max_image_age_days
        selection["countUnit"] = "days"
    else:
        selection["countType"] = "imageCountMoreThan"
        selection["countNumber"] = rule.max_image_count

    rendered: dict[str, Any] = {"rulePriority": priority}
    if rule.description is not None:
        rendered["description"] = rule.description
    rendered["selection"] = selection
    rendered["action"] = {"type": "expire"}
    return rendered


def render_lifecycle_policy(config: RepositoryConfig) -> ecr.LifecyclePolicy | None:
    if not config.lifecycle_rules and config.lifecycle_registry_id is None:
        return None
    policy: dict[str, Any] = {}
    if config.lifecycle_rules:
        rules = [
            render_lifecycle_rule(priority, rule)
            for priority, rule in resolve_lifecycle_rules(config.lifecycle_rules, repository=config.name)
        ]
        policy["LifecyclePolicyText"] = json.dumps({"rules": rules}, separators=(",", ":"))
    if config.lifecycle_registry_id is not None:
        policy["RegistryId"] = config.lifecycle_registry_id
    return ecr.LifecyclePolicy(**policy)


def repository_resource(config: RepositoryConfig, *, logical_id: LogicalId | None = None) -> ecr.Repository:
    properties: dict[str, Any] = {}
    if config.repository_name is not None:
        properties["RepositoryName"] = config.repository_name
    lifecycle_policy = render_lifecycle_policy(config)
    if lifecycle_policy is not None:
        properties["LifecyclePolicy"] = lifecycle_policy
    if config.retain:
        properties["DeletionPolicy"] = "Retain"
    return ecr.Repository(logical_id, **properties)


def render_repository(config: RepositoryConfig) -> dict[str, Any]:
    return repository_resource(config).to_dict()


class ContainerRepository:
    """An ECR repository added to a template stack.

    Lifecycle rules added through the construct are reflected in the template, even after it was added.
    """

    def __init__(self, stack: TemplateStack, *, config: RepositoryConfig):
        self.config = config
        self.logical_id: LogicalId = make_logical_id(config.name, "Resource")
        self.resource = repository_resource(config, logical_id=self.logical_id)
        stack.add_resource(self.resource)
        logger.info(f"Added container repository {config.name} to stack {stack.name}")

    def add_lifecycle_rule(self, rule: LifecycleRule) -> None:
        self.config.add_lifecycle_rule(rule)
        lifecycle_policy = render_lifecycle_policy(self.config)
        assert lifecycle_policy is not None, "A repository with lifecycle rules always has a lifecycle policy"
        self.resource.LifecyclePolicy = lifecycle_policy

    @property
    def repository_name(self) -> AWSHelperFn:
        return Ref(self.resource)

    @property
    def repository_arn(self) -> AWSHelperFn:
        return GetAtt(self.resource, "Arn")

    def repository_uri_for_tag(self, tag: str | None = None) -> AWSHelperFn:
        parts: list[Any] = [AccountId, ".dkr.ecr.", Region, ".", URLSuffix, "/", self.repository_name]
        if tag is not None:
            parts.append(f":{tag}")
        return Join("", parts)

    @property
    def repository_uri(self) -> AWSHelperFn:
        return self.repository_uri_for_tag()
