"""
Company routes - Finnhub profile and news.
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException

from stockcompare.api.deps import get_finnhub_client, unavailable_to_http
from stockcompare.api.schemas import CompanyProfileOut, NewsArticleOut
from stockcompare.domain.errors import ConfigurationError, DataUnavailableError, InvalidInputError
from stockcompare.infrastructure.finnhub.finnhub_client import FinnhubClient

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{ticker}", response_model=CompanyProfileOut)
async def get_company(ticker: str, client: FinnhubClient = Depends(get_finnhub_client)):
    try:
        profile = await client.get_company_profile(ticker)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    except DataUnavailableError as exc:
        raise unavailable_to_http(exc)

    return CompanyProfileOut(
        ticker=profile.ticker,
        name=profile.name,
        logo=profile.logo,
        country=profile.country,
        currency=profile.currency,
        exchange=profile.exchange,
        industry=profile.industry,
        ipo=profile.ipo,
        marketCap=profile.market_cap,
        phone=profile.phone,
        shareOutstanding=profile.share_outstanding,
        weburl=profile.weburl,
    )


@router.get("/{ticker}/news")
async def get_company_news(ticker: str, client: FinnhubClient = Depends(get_finnhub_client)) -> Dict:
    """Ten most recent articles from the last week."""
    try:
        articles = await client.get_company_news(ticker)
    except InvalidInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    except DataUnavailableError as exc:
        raise unavailable_to_http(exc)

    return {
        "ticker": ticker.strip().upper(),
        "articles": [
            NewsArticleOut(
                headline=a.headline,
                summary=a.summary,
                source=a.source,
                url=a.url,
                image=a.image,
                published_at=a.datetime,
            ).model_dump(by_alias=True, mode="json")
            for a in articles
        ],
    }
