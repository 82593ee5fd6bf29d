from __future__ import annotations

import logging
from collections.abc import Sequence

from orpricing.constants import MAX_AMBIGUOUS_SHOWN, MAX_AMBIGUOUS_SUGGESTIONS
from orpricing.engine.exceptions import AmbiguousError, NotFoundError
from orpricing.pricing.models import CatalogModel

logger = logging.getLogger(__name__)


class ModelResolver:
    """Resolve a free-text query to one canonical model id.

    Tiers run in order and stop at the first unique answer: exact id
    (case-insensitive), id substring, then id substring unioned with display
    name substring.
    """

    def __init__(self, models: Sequence[CatalogModel]) -> None:
        self._models = list(models)

    def resolve(self, query: str) -> str:
        q = query.lower()

        for model in self._models:
            if model.id.lower() == q:
                return model.id

        id_matches = sorted(
            (m for m in self._models if q in m.id.lower()),
            key=lambda m: m.id,
        )
        if len(id_matches) == 1:
            return id_matches[0].id

        name_matches = sorted(
            (m for m in self._models if q in m.name.lower()),
            key=lambda m: m.id,
        )

        seen: set[str] = set()
        candidates: list[CatalogModel] = []
        for model in [*id_matches, *name_matches]:
            if model.id in seen:
                continue
            seen.add(model.id)
            candidates.append(model)

        if not candidates:
            raise NotFoundError(
                f"no model found matching '{query}'",
                suggestions=[
                    "Check the model name/ID",
                    "Use 'or-pricing search' to find models",
                ],
            )

        if len(candidates) == 1:
            return candidates[0].id

        logger.info(
            "ambiguous_query",
            extra={
                "event": "ambiguous_query",
                "model": query,
                "count": len(candidates),
            },
        )
        raise _ambiguous(query, candidates)


def _ambiguous(query: str, candidates: list[CatalogModel]) -> AmbiguousError:
    lines = [f"  {m.id}  {m.name}" for m in candidates[:MAX_AMBIGUOUS_SHOWN]]
    hidden = len(candidates) - MAX_AMBIGUOUS_SHOWN
    if hidden > 0:
        lines.append(f"  ... and {hidden} more")

    top_ids = [m.id for m in candidates[:MAX_AMBIGUOUS_SUGGESTIONS]]
    suggestions = [f"Use a full model ID, e.g.: or-pricing price {top_ids[0]}"]
    suggestions.extend(f"or-pricing price {mid}" for mid in top_ids[1:])

    message = (
        f"Multiple models match '{query}':\n"
        + "\n".join(lines)
        + "\nBe more specific, or use the full model ID"
    )
    return AmbiguousError(
        message,
        candidates=candidates,
        suggestions=suggestions,
    )
