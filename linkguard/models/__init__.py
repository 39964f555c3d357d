"""
LinkGuard Data Models Package

Pydantic models for data validation and serialization.
"""

from .results import *
