from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.concurrency import run_in_threadpool

from speaking_assessor.api.dependencies import get_analyzer, get_engine
from speaking_assessor.config import settings
from speaking_assessor.errors import AnalysisError, InvalidAudioError
from speaking_assessor.models.requests import FeatureScoreRequest, TranscriptRequest
from speaking_assessor.models.schemas.assessment import Assessment
from speaking_assessor.models.schemas.transcript_analysis import TranscriptAnalysis
from speaking_assessor.services import audio_decoder
from speaking_assessor.services.pipeline import orchestrator
from speaking_assessor.services.pipeline.s2_transcript_analyzer import TranscriptAnalyzer
from speaking_assessor.services.pipeline.s3_scoring_engine import ScoringEngine

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health")
async def health(engine: ScoringEngine = Depends(get_engine)):
    return {
        "status": "ok",
        "analysis_version": engine.config.analysis_version,
    }


@router.post("/assess", response_model=Assessment)
@limiter.limit(settings.rate_limit)
async def assess(
    request: Request,
    audio_file: UploadFile = File(...),
    topic: str = Form(..., max_length=100),
    transcript: str = Form("", max_length=settings.max_transcript_chars),
    engine: ScoringEngine = Depends(get_engine),
):
    content = await audio_file.read()

    error = audio_decoder.validate_audio_file(audio_file.filename, audio_file.content_type, len(content))
    if error:
        raise HTTPException(status_code=400, detail=error)

    try:
        samples, sample_rate = await run_in_threadpool(audio_decoder.decode_audio, content)
        return await run_in_threadpool(
            orchestrator.assess,
            samples,
            sample_rate,
            transcript=transcript,
            topic=topic,
            engine=engine,
        )
    except InvalidAudioError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AnalysisError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/assess/features", response_model=Assessment)
@limiter.limit(settings.rate_limit)
async def assess_features(
    request: Request,
    body: FeatureScoreRequest,
    engine: ScoringEngine = Depends(get_engine),
):
    try:
        return await run_in_threadpool(
            orchestrator.assess_features,
            body.features,
            transcript=body.transcript,
            topic=body.topic,
            engine=engine,
        )
    except AnalysisError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/analyze/transcript", response_model=TranscriptAnalysis)
@limiter.limit(settings.rate_limit)
async def analyze_transcript(
    request: Request,
    body: TranscriptRequest,
    analyzer: TranscriptAnalyzer = Depends(get_analyzer),
):
    return analyzer.analyze(body.text)
