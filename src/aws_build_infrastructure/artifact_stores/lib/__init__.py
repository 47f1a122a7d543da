from .ecr import ContainerRepository
from .ecr import LifecycleRule
from .ecr import LifecycleRuleError
from .ecr import RepositoryConfig
from .ecr import TagStatus
from .ecr import add_lifecycle_rule
from .ecr import render_lifecycle_policy
from .ecr import render_lifecycle_rule
from .ecr import render_repository
from .ecr import repository_resource
from .ecr import resolve_lifecycle_rules
