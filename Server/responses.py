"""
OrgAdmin Server - Response Envelope

Every user endpoint answers with the same envelope:
{"success": bool, "message": str, "data": any}
"""

from typing import Any

from fastapi.encoders import jsonable_encoder

from exceptions import OrgAdminNotFoundError


def BuildOk(message: str, data: Any = None) -> dict:
    """
    Build a success envelope

    Args:
        message: Human-readable outcome
        data: Optional payload (Pydantic models are dumped by alias)

    Returns:
        dict: Envelope
    """
    return {
        "success": True,
        "message": message,
        "data": jsonable_encoder(data, by_alias=True)
    }


def BuildObject(data: Any) -> dict:
    """Wrap a payload in a success envelope"""
    return BuildOk("OK", data)


def BuildError(message: str) -> dict:
    """Build a failure envelope"""
    return {
        "success": False,
        "message": message,
        "data": None
    }


def WrapOrNotFound(data: Any, message: str = "Resource not found") -> dict:
    """
    Wrap a payload, or signal not-found when it is missing

    Raises:
        OrgAdminNotFoundError: If data is None
    """
    if data is None:
        raise OrgAdminNotFoundError(message)
    return BuildObject(data)
