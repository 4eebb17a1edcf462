"""
Pydantic schemas for API request/response validation.
"""
from .config import ConfigReadResponse, ConfigUpdate, ConfigUpdateResponse

__all__ = ["ConfigReadResponse", "ConfigUpdate", "ConfigUpdateResponse"]
