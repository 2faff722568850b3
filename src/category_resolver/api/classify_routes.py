"""
Classification Routes

Batch endpoint answering, for each link title on a page, whether it falls in
one of the game's blocked categories.

Failure Semantics
-----------------
Remote and cache failures never surface here: the pipeline degrades to
"not blocked" for the affected titles. Only malformed input is rejected.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from .models import ClassifyRequest, ClassifyResponse
from .dependencies import get_orchestrator
from ..resolvers.orchestrator import ResolutionOrchestrator

router = APIRouter(prefix="/classify", tags=["classify"])


@router.post(
    "",
    response_model=ClassifyResponse,
    summary="Find blocked links among a batch of article titles",
    status_code=status.HTTP_200_OK,
)
async def classify(
    req: ClassifyRequest,
    orchestrator: Annotated[ResolutionOrchestrator, Depends(get_orchestrator)],
) -> ClassifyResponse:
    """
    Classify a batch of titles against the blocked categories.

    Parameters
    ----------
    req : ClassifyRequest
        Contains:
        - titles: Article titles to check
        - blockedCategories: Category names blocked in this game

    Returns
    -------
    ClassifyResponse
        `blockedLinks` maps every requested title to its blocked category,
        or null when the link is allowed.
    """
    results = await orchestrator.classify(req.titles, req.blocked_categories)

    return ClassifyResponse(
        blocked_links={
            title: category.value if category is not None else None
            for title, category in results.items()
        }
    )
