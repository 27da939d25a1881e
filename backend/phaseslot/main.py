"""Phase Slot FastAPI application."""
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from phaseslot.config import settings
from phaseslot.config_hash import get_config_hash
from phaseslot.errors import ErrorCode, GameError
from phaseslot.logging_setup import configure_logging
from phaseslot.logic.engine import GameEngine
from phaseslot.logic.phase import cycle_position
from phaseslot.middleware import ErrorHandlerMiddleware, SessionIdMiddleware
from phaseslot.protocol import (
    CompleteRoundResponse,
    Cycle,
    InitResponse,
    Outcome,
    SessionSnapshot,
    SpinRequest,
    SpinResponse,
)
from phaseslot.redis_service import redis_service
from phaseslot.session import (
    SessionState,
    begin_spin,
    build_game_config,
    complete_round,
    new_session,
    settle_spin,
)
from phaseslot.telemetry import (
    SessionInitEvent,
    SpinProcessedEvent,
    SpinRejectedEvent,
    telemetry_service,
)
from phaseslot.validators import validate_spin_request


logger = logging.getLogger(__name__)

# Rejections worth reporting; validation errors are not
REJECTION_TELEMETRY_CODES = {ErrorCode.ROUND_IN_PROGRESS, ErrorCode.INSUFFICIENT_FUNDS}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and manage Redis connection lifecycle."""
    configure_logging("DEBUG" if settings.debug else settings.log_level)
    await redis_service.connect()
    yield
    await redis_service.close()


app = FastAPI(
    title="Phase Slot",
    version="0.1.0",
    description="Session server for the phase-driven 3x3 slot game",
    lifespan=lifespan,
)

app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(SessionIdMiddleware)

# Game engine instance
engine = GameEngine()


def now_ms() -> int:
    """Wall clock in milliseconds."""
    return int(time.time() * 1000)


def _snapshot(session: SessionState, at_ms: int) -> SessionSnapshot:
    return SessionSnapshot(
        balance=session.balance,
        roundState=session.round_state,
        cycle=Cycle.from_position(cycle_position(session.elapsed_ms(at_ms))),
    )


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/init")
async def init(request: Request) -> dict:
    """
    GET /init.

    Creates the session on first call; returns configuration and the
    current session snapshot.
    """
    session_id = request.state.session_id
    current_ms = now_ms()

    session = await redis_service.get_session(session_id)
    created = session is None
    if created:
        session = new_session(session_id, current_ms)
        await redis_service.save_session(session)
        logger.info("Session created session=%s", session_id)

    response = InitResponse(session=_snapshot(session, current_ms))

    telemetry_service.emit_session_init(
        SessionInitEvent(
            session_id=session_id,
            new_session=created,
            balance=session.balance,
            phase=response.session.cycle.phase,
        )
    )

    return response.model_dump(mode="json")


@app.post("/spin")
async def spin(request: Request, body: SpinRequest) -> dict:
    """
    POST /spin.

    Implements:
    - Request validation (bet menu)
    - Idempotency (same clientRequestId returns cached response)
    - Per-session locking (ROUND_IN_PROGRESS on concurrent spin)
    - Bet deduction, spin resolution at the server-side phase, win credit
    """
    session_id = request.state.session_id

    # 1) Validate request
    validate_spin_request(body)

    payload = {"betAmount": body.betAmount}

    # 2) Check idempotency cache (fast path)
    cached = await redis_service.check_idempotency(session_id, body.clientRequestId, payload)
    if cached is not None:
        return cached

    lock_start = time.monotonic()
    try:
        async with redis_service.session_lock(session_id) as lock_metrics:
            # 3) Re-check idempotency inside lock
            cached = await redis_service.check_idempotency(
                session_id, body.clientRequestId, payload
            )
            if cached is not None:
                return cached

            # 4) Load or create session; freeze phase and config for this spin
            spin_ms = now_ms()
            session = await redis_service.get_session(session_id)
            if session is None:
                session = new_session(session_id, spin_ms)

            phase = session.phase_at(spin_ms)
            config = build_game_config(body.betAmount)
            balance_before = session.balance

            # 5) Deduct bet, resolve, credit
            session = begin_spin(session, config.bet_amount)
            result = engine.resolve_spin(phase, config)
            round_id = str(uuid.uuid4())
            session, big_win = settle_spin(session, result, config, round_id)

            response = SpinResponse(
                roundId=round_id,
                phase=phase.value,
                betAmount=config.bet_amount,
                outcome=Outcome.from_result(result, big_win),
                balanceBefore=balance_before,
                balanceAfter=session.balance,
                roundState=session.round_state,
            )
            response_dict = response.model_dump(mode="json")

            # 6) Persist
            await redis_service.store_idempotency(
                session_id, body.clientRequestId, payload, response_dict
            )
            await redis_service.save_session(session)

            telemetry_service.emit_spin_processed(
                SpinProcessedEvent(
                    session_id=session_id,
                    client_request_id=body.clientRequestId,
                    round_id=round_id,
                    phase=phase.value,
                    bet_amount=config.bet_amount,
                    base_win=result.base_win,
                    total_win=result.total_win,
                    is_big_win=big_win,
                    lines_won=[line.line_id for line in result.lines_won],
                    config_hash=get_config_hash(),
                    lock_acquire_ms=lock_metrics.acquire_ms,
                )
            )

            return response_dict

    except GameError as e:
        if e.code in REJECTION_TELEMETRY_CODES:
            telemetry_service.emit_spin_rejected(
                SpinRejectedEvent(
                    session_id=session_id,
                    client_request_id=body.clientRequestId,
                    reason=e.code.value,
                    lock_acquire_ms=(time.monotonic() - lock_start) * 1000,
                )
            )
        raise


@app.post("/round/complete")
async def round_complete(request: Request) -> dict:
    """
    POST /round/complete.

    Called by the client once its win reveal has finished.
    """
    session_id = request.state.session_id

    async with redis_service.session_lock(session_id):
        session = await redis_service.get_session(session_id)
        if session is None:
            raise GameError(ErrorCode.INVALID_REQUEST, "Unknown session; call /init first.")

        session = complete_round(session)
        await redis_service.save_session(session)

    response = CompleteRoundResponse(session=_snapshot(session, now_ms()))
    return response.model_dump(mode="json")


@app.delete("/session")
async def end_session(request: Request) -> dict:
    """DELETE /session drops the session state."""
    session_id = request.state.session_id

    async with redis_service.session_lock(session_id):
        await redis_service.clear_session(session_id)

    logger.info("Session ended session=%s", session_id)
    return {"status": "ok"}
