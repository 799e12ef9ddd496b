"""
Serializers package for claimy.

This package contains serializer implementations for converting snapshot records
to and from bytes for durable storage.
"""

from .serializer import Serializer
from .pydantic_serializer import PydanticSerializer

__all__ = [
    'Serializer',
    'PydanticSerializer',
]
