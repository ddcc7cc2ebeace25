"""fedsearch — aggregate OpenSearch results from many endpoints into one ranked set."""

__version__ = "0.1.0"

from fedsearch.core.exceptions import (  # noqa: E402
    ConfigurationError,
    FederatedSearchError,
    ResponseDecodeError,
    UnsupportedEncodingError,
)
from fedsearch.core.federated import FederatedSearch  # noqa: E402
from fedsearch.models.result import AggregateResult  # noqa: E402

__all__ = [
    "AggregateResult",
    "ConfigurationError",
    "FederatedSearch",
    "FederatedSearchError",
    "ResponseDecodeError",
    "UnsupportedEncodingError",
    "__version__",
]
