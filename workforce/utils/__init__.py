"""
Utilities package for common helper functions.
"""
from .response_utils import get_cors_headers, build_response
from .time_utils import now_iso, today
from .token_utils import encode_token, decode_token
from .json_utils import json_clean, to_dynamo

__all__ = [
    'get_cors_headers',
    'build_response',
    'now_iso',
    'today',
    'encode_token',
    'decode_token',
    'json_clean',
    'to_dynamo'
]
