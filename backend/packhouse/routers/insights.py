"""LLM production insights endpoint."""
from fastapi import APIRouter, Depends

from ..auth import ViewAccessChecker
from ..config import settings
from ..schemas import InsightsResponse, User, View
from ..services.insights_client import analyze_production_data, latest_records
from ..store import RecordStore, get_record_store

router = APIRouter(prefix="/insights", tags=["insights"])


@router.post("", response_model=InsightsResponse)
def generate_insights(
    current_user: User = Depends(ViewAccessChecker(View.INSIGHTS)),
    store: RecordStore = Depends(get_record_store),
):
    """Short analysis of the latest production lots (always answers with text)."""
    records = store.snapshot().production
    text = analyze_production_data(
        records,
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        api_url=settings.GEMINI_API_URL,
        company_name=settings.INSIGHTS_COMPANY_NAME,
        limit=settings.INSIGHTS_RECORD_LIMIT,
        timeout=settings.INSIGHTS_TIMEOUT_SECONDS,
    )
    return InsightsResponse(
        text=text,
        record_count=len(latest_records(records, settings.INSIGHTS_RECORD_LIMIT)),
    )
