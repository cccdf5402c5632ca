"""
Handlers package for request handling.
"""
from .common import error_response, error_status

__all__ = [
    'error_response',
    'error_status'
]
