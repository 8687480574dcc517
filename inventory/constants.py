"""
Constants and configuration values for the resource inventory.
"""

# Default configuration values
DEFAULT_WORKERS = 5
DEFAULT_OUTPUT_FORMAT = "csv"
DEFAULT_OUTPUT_DIRECTORY = "output"

# Supported output formats
SUPPORTED_OUTPUT_FORMATS = ["csv", "json", "txt"]

# Placeholder rendered for resources without a name
NOT_AVAILABLE = "N/A"

# Region label used by collectors of global services
GLOBAL_REGION_LABEL = "Global"

# Seconds a waiting thread sleeps between cancellation checks
CANCELLATION_POLL_INTERVAL = 0.1

# Standard column headers shared by every collector
CATEGORY_HEADER = "Category"
SUB_CATEGORY_HEADERS = ["SubCategory1", "SubCategory2", "SubCategory3"]
NAME_HEADER = "Name"
REGION_HEADER = "Region"
ARN_HEADER = "ARN"

# Error messages
ERROR_MESSAGES = {
    "invalid_output_format": "Invalid output format '{format}'. Supported formats: {supported}",
    "invalid_workers": "Invalid worker count {workers}. Must be at least 1",
    "missing_output_directory": "Output directory is required",
    "duplicate_collector": "Collector '{name}' is already registered",
    "unknown_category": "Unknown category specified: {name}",
    "unknown_name_kind": "No name loader registered for kind '{kind}'",
    "credentials_not_found": "AWS credentials not found. Please configure credentials, set AWS_PROFILE, or run 'aws sso login'.",
    "sso_expired": "AWS SSO session has expired. Please run 'aws sso login' to refresh your session: {error}",
    "credentials_invalid": "AWS credentials are not set or invalid: {error}",
    "invalid_arn": "Invalid ARN format: {arn}",
    "run_cancelled": "Collection run cancelled: {reason}",
}

# Logging configuration
LOGGING_CONFIG = {
    "level": "WARNING",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "suppress_modules": ["boto3", "botocore", "urllib3"],
}

# File naming patterns
FILE_PATTERNS = {
    "collector": "{name}.{format}",
    "all": "all.csv",
    "errors": "errors.{format}",
}

# Browsable index written next to an account's resources directory
HTML_FILES = {
    "manifest": "files.json",
    "archive": "resources.zip",
    "index": "index.html",
}
