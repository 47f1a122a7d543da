from .asset_upload import AssetPathNotDirectoryError
from .asset_upload import asset_object_key
from .asset_upload import asset_parameter_values
from .asset_upload import hash_directory
from .program import populate_template_stack
from .program import pulumi_program
from .template_deployment import MissingAssetBucketError
from .template_deployment import TemplateDeployment
from .template_deployment import get_asset_bucket_name
