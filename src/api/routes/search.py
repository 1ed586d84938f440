from fastapi import APIRouter, Depends

from src.schemas.activity import KeywordExpansionRequest, KeywordExpansionResponse
from src.search.keywords import KeywordExpander, build_keyword_expander, expand_keywords_safely

router = APIRouter(tags=["search"])


def get_keyword_expander() -> KeywordExpander:
    return build_keyword_expander()


@router.post("/search/keywords", response_model=KeywordExpansionResponse)
async def expand_search_keywords(
    payload: KeywordExpansionRequest,
    expander: KeywordExpander = Depends(get_keyword_expander),
) -> KeywordExpansionResponse:
    """Related keywords for the smart-search button; failure degrades to an empty list."""
    if not payload.term.strip():
        return KeywordExpansionResponse(keywords=[], available=True)
    result = await expand_keywords_safely(expander, payload.term)
    return KeywordExpansionResponse(
        keywords=result.keywords,
        available=result.available,
        message=result.message,
    )
