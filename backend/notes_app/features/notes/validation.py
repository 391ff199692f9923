"""
Notes feature: Title/content rules checked before any write.

The same rules gate manual saves, auto-saves and the CRUD endpoints.
Only the first failing rule is reported so the editor shows one message.
"""

from dataclasses import dataclass
from enum import Enum

from notes_app.config import Settings, get_settings
from notes_app.core.exceptions import NoteValidationError
from notes_app.features.notes.schemas import NoteDraft


class ValidationReason(str, Enum):
    TITLE_REQUIRED = "title_required"
    TITLE_TOO_SHORT = "title_too_short"
    TITLE_TOO_LONG = "title_too_long"
    CONTENT_REQUIRED = "content_required"
    CONTENT_TOO_SHORT = "content_too_short"


@dataclass(frozen=True)
class NoteRules:
    min_title_length: int = 3
    max_title_length: int = 200
    min_content_length: int = 10

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "NoteRules":
        settings = settings or get_settings()
        return cls(
            min_title_length=settings.MIN_TITLE_LENGTH,
            max_title_length=settings.MAX_TITLE_LENGTH,
            min_content_length=settings.MIN_CONTENT_LENGTH,
        )


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: ValidationReason | None = None
    message: str | None = None


VALID = ValidationResult(valid=True)


def _fail(reason: ValidationReason, message: str) -> ValidationResult:
    return ValidationResult(valid=False, reason=reason, message=message)


def validate(draft: NoteDraft, rules: NoteRules | None = None) -> ValidationResult:
    """Check a draft against the note rules.

    Order: title required > title too short > title too long >
    content required > content too short.
    """
    rules = rules or NoteRules.from_settings()
    title = draft.title.strip()
    content = draft.content.strip()

    if not title:
        return _fail(ValidationReason.TITLE_REQUIRED, "Title is required")
    if len(title) < rules.min_title_length:
        return _fail(
            ValidationReason.TITLE_TOO_SHORT,
            f"Title must be at least {rules.min_title_length} characters long",
        )
    if len(title) > rules.max_title_length:
        return _fail(
            ValidationReason.TITLE_TOO_LONG,
            f"Title must be at most {rules.max_title_length} characters long",
        )
    if not content:
        return _fail(ValidationReason.CONTENT_REQUIRED, "Content is required")
    if len(content) < rules.min_content_length:
        return _fail(
            ValidationReason.CONTENT_TOO_SHORT,
            f"Content must be at least {rules.min_content_length} characters long",
        )

    return VALID


def ensure_valid(draft: NoteDraft, rules: NoteRules | None = None) -> NoteDraft:
    """Return the trimmed draft, or raise NoteValidationError with the first failing rule."""
    result = validate(draft, rules)
    if not result.valid:
        raise NoteValidationError(reason=result.reason.value, message=result.message)
    return draft.trimmed()
