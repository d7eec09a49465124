from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import List, Optional
import logging
import uvicorn
from datetime import datetime

from ai_scientist import __version__
from ai_scientist.agents.assistant_client import AssistantClient
from ai_scientist.agents.chat_agent import ChatAgent
from ai_scientist.agents.data_agent import parse_csv
from ai_scientist.config import get_config
from ai_scientist.pipeline import analyze
from ai_scientist.schemas import AnalysisReport, ChatExchange

logger = logging.getLogger(__name__)

config = get_config()

app = FastAPI(
    title="Autonomous AI Scientist API",
    description="Data science readiness reports and conversational data exploration",
    version=__version__,
    docs_url="/docs" if config.api.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.api.ENABLE_DOCS else None,
)

if config.api.ENABLE_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class ParseRequest(BaseModel):
    content: str


class ParseResponse(BaseModel):
    headers: List[str]
    rows: List[List[str]]


class AnalyzeRequest(BaseModel):
    headers: List[str]
    rows: List[List[str]]
    target_column: str


class AnalyzeCSVRequest(BaseModel):
    content: str
    target_column: str


class QueryRequest(BaseModel):
    question: str = Field(min_length=1)
    headers: List[str]
    rows: List[List[str]]
    report: Optional[AnalysisReport] = None
    use_assistant: bool = False


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@app.post("/parse", response_model=ParseResponse)
async def parse_endpoint(request: ParseRequest):
    """Split raw CSV text into headers and rows"""
    headers, rows = parse_csv(request.content)
    if not headers:
        raise HTTPException(status_code=400, detail="CSV content is empty")
    return ParseResponse(headers=headers, rows=rows)


@app.post("/analyze", response_model=AnalysisReport)
async def analyze_endpoint(request: AnalyzeRequest):
    """Run the readiness analysis on an already-parsed table"""
    if not request.headers:
        raise HTTPException(status_code=400, detail="At least one header is required")

    report = analyze(request.headers, request.rows, request.target_column)
    logger.info(f"Analysis for '{request.target_column}': {report.data_quality.verdict}")
    return report


@app.post("/analyze/csv", response_model=AnalysisReport)
async def analyze_csv_endpoint(request: AnalyzeCSVRequest):
    """Parse raw CSV text and run the readiness analysis"""
    headers, rows = parse_csv(request.content)
    if not headers:
        raise HTTPException(status_code=400, detail="CSV content is empty")

    report = analyze(headers, rows, request.target_column)
    logger.info(f"Analysis for '{request.target_column}': {report.data_quality.verdict}")
    return report


@app.post("/query", response_model=ChatExchange)
def query_endpoint(request: QueryRequest):
    """Answer a question about the table; may block on the text-generation service"""
    agent = ChatAgent(AssistantClient() if request.use_assistant else None)
    return agent.respond(
        request.question,
        request.report,
        request.headers,
        request.rows,
        use_assistant=request.use_assistant,
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Autonomous AI Scientist API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    uvicorn.run(
        "ai_scientist.api.main:app",
        host=config.api.DEFAULT_HOST,
        port=config.api.DEFAULT_PORT,
        workers=config.api.WORKERS,
        log_level=config.logging_level.lower()
    )
