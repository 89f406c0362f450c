from ._binder import ParameterBinder, is_collection, is_file
from ._codec import JsonCodec
from ._decoder import ResponseDecoder
from ._retry import RetryExecutor, pause
from ._template import fill_config_variables, fill_path_variables, has_protocol

__all__ = [
    "JsonCodec",
    "ParameterBinder",
    "ResponseDecoder",
    "RetryExecutor",
    "fill_config_variables",
    "fill_path_variables",
    "has_protocol",
    "is_collection",
    "is_file",
    "pause",
]
