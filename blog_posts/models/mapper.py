# blog_posts/models/mapper.py
"""
Translation between request payloads, stored post documents and the
representation returned to API clients.

Stored documents keep the author's first and last names apart; clients only
ever see a single ``author`` string, which is derived here on every
projection and never persisted.
"""
import logging
from typing import Any, Dict, Iterable, Mapping

from pydantic import ValidationError as PydanticValidationError

from blog_posts.errors import ValidationError
from blog_posts.models.schemas import PostAuthor, PostCreate, PostDocument, PostUpdate, PostView

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "content")


def describe_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """Render pydantic error entries as one message naming every offending field."""
    problems = []
    for err in errors:
        field = ".".join(str(part) for part in err["loc"])
        if not field:
            problems.append(f"Invalid request body: {err['msg']}")
            continue
        if err["type"] == "missing":
            problems.append(f"Missing `{field}` in request body")
        else:
            problems.append(f"Invalid `{field}` in request body: {err['msg']}")
    return "; ".join(problems)


def describe_validation_error(exc: PydanticValidationError) -> str:
    return describe_errors(exc.errors())


def to_view(doc: PostDocument) -> PostView:
    return PostView(
        id=doc.id,
        title=doc.title,
        content=doc.content,
        author=doc.author.display_name,
        created=doc.created,
    )


def from_create_request(body: Any) -> PostDocument:
    """Validate a create payload and build a document for the store.

    Extra keys are ignored, including any client-supplied ``id``.
    """
    if not isinstance(body, Mapping):
        raise ValidationError("Request body must be a JSON object")
    try:
        payload = PostCreate.model_validate(body)
    except PydanticValidationError as exc:
        message = describe_validation_error(exc)
        logger.info(f"Rejected create request: {message}")
        raise ValidationError(message) from exc

    return PostDocument(
        author=PostAuthor(
            first_name=payload.author.first_name,
            last_name=payload.author.last_name,
        ),
        title=payload.title,
        content=payload.content,
        created=payload.created,
    )


def from_update_request(body: Any) -> Dict[str, str]:
    """Return the subset of ``body`` that an update may change (title, content)."""
    if not isinstance(body, Mapping):
        raise ValidationError("Request body must be a JSON object")
    try:
        payload = PostUpdate.model_validate(
            {key: body[key] for key in UPDATABLE_FIELDS if key in body}
        )
    except PydanticValidationError as exc:
        message = describe_validation_error(exc)
        logger.info(f"Rejected update request: {message}")
        raise ValidationError(message) from exc

    fields = payload.model_dump(exclude_unset=True)
    for key, value in fields.items():
        if value is None:
            raise ValidationError(f"Invalid `{key}` in request body: must not be null")
    return fields
