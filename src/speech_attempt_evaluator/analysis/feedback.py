"""Contract for turning failure reasons into learner-facing tips."""

from collections.abc import Collection
from typing import Protocol

from speech_attempt_evaluator.models.evaluation import ReasonCode


class FeedbackComposer(Protocol):
    """Maps reason codes to localized tips.

    Implemented by the presentation layer; this package only produces the
    ``reasons`` it consumes.
    """

    def compose(
        self,
        reasons: Collection[ReasonCode],
        ui_language: str,
        target_label: str | None = None,
    ) -> list[str]:
        """Return one or more tips for a failed attempt.

        Args:
            reasons: Reason codes from an EvaluationResult.
            ui_language: Language code of the learner's interface.
            target_label: Display name of the language being practiced.

        Returns:
            Tip strings in ``ui_language``; never empty for a failed attempt.
        """
        ...
