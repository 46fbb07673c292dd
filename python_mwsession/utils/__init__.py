from .logger import JsonFormatter, setup_logging
from .params import encode_params, encode_value, filter_params, merge_params

__all__ = [
	"JsonFormatter",
	"setup_logging",
	"encode_params",
	"encode_value",
	"filter_params",
	"merge_params",
]
