"""Search endpoint — runs one federated search and returns the merged results."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Request

from fedsearch.api.deps import get_settings
from fedsearch.config.settings import Settings
from fedsearch.core.exceptions import ConfigurationError, ResponseDecodeError, UnsupportedEncodingError
from fedsearch.core.federated import FederatedSearch
from fedsearch.models.query import FederatedSearchRequest
from fedsearch.models.result import AggregateResult

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/search",
    response_model=AggregateResult,
    summary="Federated Search",
    description=(
        "Query every source concurrently and merge the results by score.\n\n"
        "Any of `urls`, `timeout` and `fields` may be given in the body to "
        "override the server configuration for this call. Unless "
        "`server.allow_url_override` is set, `urls` must be a subset of the "
        "configured sources."
    ),
    responses={
        400: {"description": "Configuration error — no or invalid source URLs"},
        403: {"description": "URL override names a source outside the configuration"},
        502: {"description": "A source answered with an unsupported or undecodable response"},
    },
)
async def search(
    request: Request,
    body: FederatedSearchRequest | None = Body(default=None),
    settings: Settings = Depends(get_settings),
) -> AggregateResult:
    """Execute a federated search.

    Args:
        request: The incoming HTTP request (used to reach app state).
        body: Optional per-call overrides.
        settings: Server settings (injected).

    Returns:
        The merged, score-sorted results and the summed total.
    """
    fed = settings.federation
    overrides = body or FederatedSearchRequest()

    if overrides.urls is not None and not settings.server.allow_url_override:
        unknown = [url for url in overrides.urls if url not in fed.urls]
        if unknown:
            logger.warning("Rejected search for unconfigured sources: %s", unknown)
            raise HTTPException(status_code=403, detail=f"Source URL not configured: {unknown[0]}")

    searcher = FederatedSearch(
        overrides.urls if overrides.urls is not None else fed.urls,
        timeout=overrides.timeout or fed.timeout,
        fields=overrides.fields if overrides.fields is not None else fed.fields,
        max_workers=fed.max_workers,
        unsupported_content=fed.unsupported_content,
        user_agent=fed.user_agent,
        transport=getattr(request.app.state, "transport", None),
    )

    try:
        return await searcher.search()
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except (UnsupportedEncodingError, ResponseDecodeError) as e:
        logger.error("Federated search failed: %s", e)
        raise HTTPException(status_code=502, detail=str(e)) from e
