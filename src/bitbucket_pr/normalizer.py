"""
Normalization of raw Bitbucket API payloads into the entity model.

The transport hands back whatever JSON the API returned: nested dicts, lists
and scalars of unknown shape. The functions here validate such a payload
against one of the models in bitbucket_pr.models and translate pydantic
validation failures into DecodeError, so callers deal with a single error
kind regardless of the validation library.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import ValidationError

from bitbucket_pr.errors import DecodeError
from bitbucket_pr.models import (
    Commits,
    ListPullRequests,
    PullRequest,
    Statuses,
    WireModel,
)

ModelT = TypeVar("ModelT", bound=WireModel)


def decode(model_type: type[ModelT], payload: Any) -> ModelT:
    """
    Validate an untyped payload and build an instance of model_type.

    Missing keys take their zero-value defaults and unknown keys are ignored.
    A known key holding a value of the wrong type fails the whole decode.

    Args:
        model_type: The WireModel subclass to build.
        payload: Decoded JSON object, as returned by the transport.

    Returns:
        A fully populated, immutable model instance.

    Raises:
        DecodeError: If the payload is not a mapping or a known field has the
            wrong type.
    """
    if not isinstance(payload, Mapping):
        raise DecodeError(
            f"Expected a JSON object for {model_type.__name__}, "
            f"got {type(payload).__name__}"
        )

    try:
        return model_type.model_validate(dict(payload))
    except ValidationError as validation_error:
        raise DecodeError(
            f"Invalid {model_type.__name__} payload: {validation_error}"
        ) from validation_error


def encode(entity: WireModel) -> dict[str, Any]:
    """Dump an entity back into the wire key layout it was decoded from."""
    return entity.model_dump(mode="json")


def decode_pull_request(payload: Any) -> PullRequest:
    return decode(PullRequest, payload)


def decode_pull_requests(payload: Any) -> ListPullRequests:
    return decode(ListPullRequests, payload)


def decode_commits(payload: Any) -> Commits:
    return decode(Commits, payload)


def decode_statuses(payload: Any) -> Statuses:
    return decode(Statuses, payload)
