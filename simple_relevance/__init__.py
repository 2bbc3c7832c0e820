"""Python client for the SimpleRelevance recommendation API."""

from .action_type import ActionType
from .api_client import SimpleRelevanceClient, set_debug
from .config import ClientConfig
from .dispatch import Operation, call_api
from .errors import (
    ConfigurationError,
    PayloadValidationError,
    SimpleRelevanceError,
    UnknownOperationError,
)
from .payloads import ActionSpec, ItemSpec, UserSpec, VariantSpec

__version__ = "0.2.0"
