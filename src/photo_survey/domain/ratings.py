"""Rating dimensions and draft validation."""

from dataclasses import dataclass, replace
from enum import StrEnum

from photo_survey.domain.errors import SurveyValidationError
from photo_survey.domain.models import RatingRecord

MIN_SCORE = 0
MAX_SCORE = 10
MIN_PASSWORD_LENGTH = 6


class Dimension(StrEnum):
    """Rated dimensions of a photo."""

    WEALTH = "wealth"
    RELEVANCE = "relevance"

    @property
    def neutral_default(self) -> int:
        """Score that needs no rationale."""
        return NEUTRAL_DEFAULTS[self]

    @property
    def label(self) -> str:
        return LABELS[self]


NEUTRAL_DEFAULTS: dict[Dimension, int] = {
    Dimension.WEALTH: 5,
    Dimension.RELEVANCE: 0,
}

LABELS: dict[Dimension, str] = {
    Dimension.WEALTH: "Level of wealth",
    Dimension.RELEVANCE: "Relevance",
}


def parse_dimension(raw: str) -> Dimension:
    """Return the dimension named by raw or raise a validation error."""
    try:
        return Dimension(raw.strip().lower())
    except ValueError:
        raise SurveyValidationError(f"Unknown rating dimension: {raw}") from None


def validate_score(value: object) -> int:
    """Return value as a score in range or raise a validation error."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise SurveyValidationError("Score must be a whole number.")
    if not MIN_SCORE <= value <= MAX_SCORE:
        raise SurveyValidationError(
            f"Score must be between {MIN_SCORE} and {MAX_SCORE}."
        )
    return value


def rationale_required(dimension: Dimension, score: int | None) -> bool:
    """Return True when score deviates from the dimension's neutral default."""
    if score is None:
        return False
    return score != dimension.neutral_default


@dataclass(frozen=True)
class RatingDraft:
    """Unsubmitted rating inputs; None marks an unselected score."""

    wealth: int | None = None
    wealth_rationale: str = ""
    relevance: int | None = None
    relevance_rationale: str = ""

    @classmethod
    def blank(cls) -> "RatingDraft":
        """Return the draft shown when a new photo becomes current."""
        return cls()

    def score(self, dimension: Dimension) -> int | None:
        return getattr(self, dimension.value)

    def rationale(self, dimension: Dimension) -> str:
        return getattr(self, f"{dimension.value}_rationale")

    def with_score(self, dimension: Dimension, value: object) -> "RatingDraft":
        """Return a copy with the dimension's score selected."""
        return replace(self, **{dimension.value: validate_score(value)})

    def with_rationale(self, dimension: Dimension, text: str) -> "RatingDraft":
        """Return a copy with the dimension's rationale text replaced."""
        return replace(self, **{f"{dimension.value}_rationale": text})

    def missing_inputs(self) -> list[str]:
        """Return the reasons this draft cannot be submitted yet."""
        missing: list[str] = []
        for dimension in Dimension:
            score = self.score(dimension)
            if score is None:
                missing.append(f"Choose a score for {dimension.label.lower()}.")
            elif (
                rationale_required(dimension, score)
                and not self.rationale(dimension).strip()
            ):
                missing.append(
                    f"Explain why {dimension.label.lower()} is not "
                    f"{dimension.neutral_default}."
                )
        return missing

    def is_complete(self) -> bool:
        return not self.missing_inputs()

    def to_record(self, user_id: str, photo_id: str) -> RatingRecord:
        """Build the stored rating; rationales only kept where required."""
        missing = self.missing_inputs()
        if missing or self.wealth is None or self.relevance is None:
            raise SurveyValidationError(missing[0] if missing else "Incomplete rating.")
        return RatingRecord(
            user_id=user_id,
            photo_id=photo_id,
            wealth_score=self.wealth,
            wealth_rationale=_kept_rationale(self, Dimension.WEALTH),
            relevance_score=self.relevance,
            relevance_rationale=_kept_rationale(self, Dimension.RELEVANCE),
        )


def _kept_rationale(draft: RatingDraft, dimension: Dimension) -> str | None:
    if rationale_required(dimension, draft.score(dimension)):
        return draft.rationale(dimension).strip()
    return None


def validate_new_password(password: str, confirmation: str | None = None) -> None:
    """Reject passwords that are too short or do not match."""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise SurveyValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
        )
    if confirmation is not None and password != confirmation:
        raise SurveyValidationError("Passwords do not match.")


def validate_email(email: str) -> str:
    """Return the trimmed email or raise if it is blank."""
    cleaned = email.strip()
    if not cleaned:
        raise SurveyValidationError("Email is required.")
    return cleaned
