"""Ranking endpoints: score, order, and highlight videos; top tags of the best performers."""

from fastapi import APIRouter, HTTPException

from algorithm.errors import InvalidInput
from algorithm.ranking import filter_by_date, score_videos, sort_scored, top_indices, top_tags

from ..models import RankedVideo, RankRequest, RankResponse, TopTagsRequest, TopTagsResponse
from ..state import get_state

router = APIRouter()


@router.post("/rank", response_model=RankResponse)
def rank(request: RankRequest):
    """
    Score every video against one `now`, then filter by day and order.
    The highlighted set is the top-k of all videos, before the day filter.
    """
    config = get_state().ranking_config
    k = request.highlight_top_k if request.highlight_top_k is not None else config.highlight_top_k
    try:
        scored = score_videos(request.videos, request.now, config)
        highlighted = top_indices(scored, k)
        ordered = sort_scored(filter_by_date(scored, request.day), request.order)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    return RankResponse(
        videos=[
            RankedVideo(
                video=s.video,
                original_index=s.original_index,
                score=s.score,
                highlighted=s.original_index in highlighted,
            )
            for s in ordered
        ],
        top_indices=sorted(highlighted),
    )


@router.post("/top-tags", response_model=TopTagsResponse)
def tags_of_top_videos(request: TopTagsRequest):
    """Tag frequency across the top-N scored videos."""
    try:
        tags = top_tags(request.videos, request.now, get_state().ranking_config, top_n=request.top_n)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    return TopTagsResponse(tags=tags)
