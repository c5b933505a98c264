from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from closet.clothing import analyze_clothing_item
from closet.color_analysis import perform_color_analysis
from closet.config import CORS_ORIGINS
from closet.errors import ExhaustedRetriesError, FlowError, ValidationError
from closet.log import configure_logging
from closet.models import (
    ClothingItemAnalysisRequest, ClothingItemAnalysisResult,
    ColorAnalysisRequest, ColorAnalysisResult,
    ErrorResponse, HealthResponse,
    OutfitInspirationRequest, OutfitInspirationResult,
    OutfitSuggestionRequest, OutfitSuggestionResult,
    OutfitVisualizationRequest, OutfitVisualizationResult,
)
from closet.outfits import (
    generate_outfit_inspiration,
    generate_outfit_suggestion,
    generate_outfit_visualization,
)

configure_logging()

app = FastAPI(title="Closet AI")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _status_for(exc: FlowError) -> int:
    if isinstance(exc, ValidationError):
        return 422
    if isinstance(exc, ExhaustedRetriesError):
        return 503
    return 502


@app.exception_handler(FlowError)
async def flow_error_handler(request: Request, exc: FlowError) -> JSONResponse:
    return JSONResponse(
        status_code=_status_for(exc),
        content=ErrorResponse(error=str(exc)).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    issues = "; ".join(
        ".".join(str(p) for p in err["loc"] if p != "body") + ": " + err["msg"] for err in exc.errors()
    )
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error=f"Invalid request: {issues}").model_dump(),
    )


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok")


@app.post("/clothing/analyze", response_model=ClothingItemAnalysisResult)
async def clothing_analyze(request: ClothingItemAnalysisRequest) -> ClothingItemAnalysisResult:
    return await analyze_clothing_item(request)


@app.post("/outfits/suggestion", response_model=OutfitSuggestionResult)
async def outfit_suggestion(request: OutfitSuggestionRequest) -> OutfitSuggestionResult:
    return await generate_outfit_suggestion(request)


@app.post("/outfits/inspiration", response_model=OutfitInspirationResult)
async def outfit_inspiration(request: OutfitInspirationRequest) -> OutfitInspirationResult:
    return await generate_outfit_inspiration(request)


@app.post("/outfits/visualization", response_model=OutfitVisualizationResult)
async def outfit_visualization(request: OutfitVisualizationRequest) -> OutfitVisualizationResult:
    return await generate_outfit_visualization(request)


@app.post("/color-analysis", response_model=ColorAnalysisResult)
async def color_analysis(request: ColorAnalysisRequest) -> ColorAnalysisResult:
    return await perform_color_analysis(request)
