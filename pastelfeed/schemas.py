"""
Request bodies accepted by the JSON API.

Each model mirrors the camelCase keys the browser sends. Parsing goes
through ``parse_body`` so that any validation problem surfaces as an
``InvalidInput`` (HTTP 400) instead of a stack trace.
"""
from typing import Annotated, Optional

from flask import request
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidInput


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError('must not be empty')
    return value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')


class RegisterRequest(RequestModel):
    username: NonBlankStr
    password: NonBlankStr
    email: NonBlankStr


class LoginRequest(RequestModel):
    username: NonBlankStr
    password: NonBlankStr


class ProfileUpdateRequest(RequestModel):
    display_name: NonBlankStr = Field(alias='displayName')


class MessageRequest(RequestModel):
    message: NonBlankStr


class SavedItemRequest(RequestModel):
    item_type: NonBlankStr = Field(alias='itemType')
    item_id: Optional[int] = Field(default=None, alias='itemId')
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias='imageUrl')


class LetterSaveRequest(RequestModel):
    title: Optional[str] = None
    content: NonBlankStr


def _describe(exc: ValidationError) -> str:
    first = exc.errors()[0]
    field = '.'.join(str(part) for part in first.get('loc', ())) or 'body'
    if first.get('type') == 'missing':
        return f'{field} is required'
    return f'{field}: {first.get("msg", "invalid value")}'


def parse_body(model):
    """Validate the JSON body of the current request against ``model``."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidInput('Request body must be a JSON object')
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidInput(_describe(exc)) from exc
