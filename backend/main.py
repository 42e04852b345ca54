from contextlib import asynccontextmanager
from datetime import date
from typing import Optional
import logging

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

# Import our services
from services.amadeus_service import AmadeusService
from services.chat_orchestrator import ChatOrchestrator
from services.config import load_settings
from services.currency_service import ExchangeRateService
from services.date_normalizer import today_in
from services.date_scanner import AlternativeDateScanner
from services.exceptions import GenerationError, ValidationError
from services.iata_codes import resolve_airport_code
from services.text_generator import TextGenerator


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ERROR_REPLY = "Sorry, I encountered an error. Please try again in a moment."
EMPTY_MESSAGE_REPLY = "Please tell me where you'd like to fly from and to, and when."


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "orchestrator", None) is not None:
        # Services were provided up front
        yield
        return

    # Missing credentials stop the server here rather than on the first request
    settings = load_settings()
    logging.getLogger().setLevel(settings.log_level)

    amadeus_service = AmadeusService.from_settings(settings)
    exchange_rate_service = ExchangeRateService.from_settings(settings)
    text_generator = TextGenerator.from_settings(settings)

    app.state.orchestrator = ChatOrchestrator(
        amadeus_service,
        exchange_rate_service,
        text_generator,
        today=lambda: today_in(settings.app_timezone),
        search_max_results=settings.search_max_results,
        display_limit=settings.display_limit,
    )
    app.state.date_scanner = AlternativeDateScanner(amadeus_service)
    logger.info("Flight search services initialized successfully")
    try:
        yield
    finally:
        await amadeus_service.close()
        await exchange_rate_service.close()
        await text_generator.close()
        app.state.orchestrator = None
        app.state.date_scanner = None


app = FastAPI(
    title="Flight Search Assistant API",
    description="Chat front-end for flight offer search",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for development
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


class ChatRequest(BaseModel):
    message: Optional[str] = None


@app.get("/")
def root():
    return {
        "message": "Flight Search Assistant API",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "health": "/api/health",
            "chat": "/api/chat",
            "alternative_dates": "/api/flights/alternative-dates"
        }
    }


@app.get("/api/health")
def health():
    return {"ok": True, "status": "healthy"}


@app.post("/api/chat")
async def chat(req: ChatRequest, request: Request):
    logger.info("[CHAT] Received chat request")
    try:
        reply = await request.app.state.orchestrator.handle_message(req.message)
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"error": str(e), "response": EMPTY_MESSAGE_REPLY})
    except GenerationError as e:
        logger.error(f"[CHAT] Failed to generate response: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to generate response", "response": ERROR_REPLY})
    except Exception as e:
        logger.exception(f"[CHAT] Error in chat endpoint: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to generate response", "response": ERROR_REPLY})

    flight_data = None
    if reply.flight_data is not None:
        flight_data = [offer.model_dump(by_alias=True) for offer in reply.flight_data]
    return {"response": reply.response, "flightData": flight_data}


@app.get("/api/flights/alternative-dates")
async def alternative_dates(
    request: Request,
    origin: str,
    destination: str,
    departure_date: date = Query(..., alias="date"),
    days_before: int = Query(3, ge=0, le=7),
    days_after: int = Query(3, ge=0, le=7),
):
    scanner = request.app.state.date_scanner
    points = await scanner.scan(
        resolve_airport_code(origin),
        resolve_airport_code(destination),
        departure_date,
        days_before=days_before,
        days_after=days_after,
    )
    return [point.model_dump(mode="json") for point in points]


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
