from .cache import CacheMode
from .cache import LocalCache
from .cache import NoCache
from .cache import ResolvedCache
from .cache import S3Cache
from .cache import render_cache
from .cache import resolve_cache
from .construct import BuildProject
from .construct import project_role_statements
from .environment import S3_BUCKET_ENV
from .environment import S3_KEY_ENV
from .environment import BuildEnvironment
from .environment import ComputeType
from .environment import EnvironmentVariable
from .environment import EnvironmentVariableType
from .environment import run_script_build_spec
from .errors import ConfigurationConflict
from .errors import InvalidConfiguration
from .errors import MissingConfiguration
from .errors import ProjectConfigError
from .errors import ProjectConfigurationError
from .project import ProjectConfig
from .project import ValidatedProject
from .project import can_extend_build_spec
from .project import construct_project
from .project import extend_build_spec
from .project import project_resource
from .project import render_build_spec
from .project import render_project
from .sources import BitBucketSource
from .sources import CodeCommitSource
from .sources import CodePipelineSource
from .sources import GitHubEnterpriseSource
from .sources import GitHubSource
from .sources import NoSource
from .sources import ProjectSource
from .sources import S3BucketSource
from .sources import render_source
