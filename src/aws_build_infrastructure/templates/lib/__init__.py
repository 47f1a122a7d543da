from .assets import ASSET_KEY_DELIMITER
from .assets import ZipDirectoryAsset
from .assets import bucket_arn
from .iam import PolicyStatement
from .iam import codebuild_logs_statement
from .iam import policy_document
from .iam import s3_read_statement
from .iam import s3_read_write_statement
from .iam import service_role
from .logical_ids import EmptyConstructPathError
from .logical_ids import LogicalId
from .logical_ids import make_logical_id
from .stack import DuplicateLogicalIdError
from .stack import TemplateStack
from .stack import TemplateValue
