"""Activity analysis routes."""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request

from ridetrace.analysis.aggregator import EmptyActivity, NoValidSamples
from ridetrace.analysis.pipeline import process_activity
from ridetrace.config import get_settings
from ridetrace.fit.decoder import DecodeFailure, decode_fit_bytes
from ridetrace.models.output import ActivityOutput

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/analyze")
async def analyze_activity(request: Request, ftp: Optional[int] = None):
    """
    Analyze a FIT file sent as the raw request body.

    Returns the same JSON document the CLI prints. Zones are included
    when `ftp` is a positive integer.
    """
    body = await request.body()
    settings = get_settings()

    try:
        decoded = decode_fit_bytes(body)
        processed = process_activity(
            decoded,
            ftp=ftp,
            tolerance=settings.simplify_tolerance,
            np_window=settings.np_window_seconds,
        )
    except DecodeFailure as exc:
        raise HTTPException(status_code=422, detail=f"Failed to decode FIT file: {exc}")
    except (EmptyActivity, NoValidSamples) as exc:
        raise HTTPException(status_code=422, detail=f"Failed to process activity: {exc}")

    logger.info("Analyzed upload: %d merged points", len(processed.merged))
    return ActivityOutput.from_processed(processed).to_payload()
