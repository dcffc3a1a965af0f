"""
Test case package

Cases are composed from plain values and build strategies; see base.py.
"""

from .base import ChildCase, Collaborators, ConformanceCase
from .authority import authority_object_case, verify_codes
from .user_defined import user_defined_case
from .operations import concatenated_operation_case, transformation_case

__all__ = [
    'ChildCase',
    'Collaborators',
    'ConformanceCase',
    'authority_object_case',
    'verify_codes',
    'user_defined_case',
    'concatenated_operation_case',
    'transformation_case'
]
