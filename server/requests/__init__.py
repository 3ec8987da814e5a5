"""
HTTP request models for the API.

These are Pydantic models for validating and parsing API requests.
"""

from .create_agent_request import CreateAgentRequest
from .instruct_request import InstructRequest
from .set_model_request import SetModelRequest

__all__ = [
    "CreateAgentRequest",
    "InstructRequest",
    "SetModelRequest",
]
