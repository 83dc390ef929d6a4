from fastapi import FastAPI, File, UploadFile, HTTPException, Path, Request, Response, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
from typing import Dict, List, Set

from . import config
from .gemini_analyzer import GeminiAnalyzer
from .history import find_item
from .presentation import build_view
from .session import AnalysisSession, SessionRegistry
from .state import AppState, ViewState
from .upload_capture import capture_upload

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="K-ANALYZE",
    description="Forensic AI-generated vs. human image detection backed by Gemini",
    version="1.0.0"
)

# Add CORS middleware for web client integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")

# WebSocket connections for pushing view updates
# Key: session_id (string), Value: Set of WebSocket connections
active_connections: Dict[str, Set[WebSocket]] = {}


def make_analyzer() -> GeminiAnalyzer:
    # Key is read per session so a missing key only fails the analysis itself
    return GeminiAnalyzer(api_key=config.get_api_key())


def make_listener(session_id: str):
    async def listener(state: ViewState):
        await push_state(session_id, state)
    return listener


# In-memory sessions, gone on restart
sessions = SessionRegistry(make_analyzer, make_listener)


def get_session(request: Request, response: Response) -> AnalysisSession:
    """Look up the caller's session, issuing a new cookie if there is none."""
    session = sessions.get(request.cookies.get(config.SESSION_COOKIE))
    if session is None:
        session_id = sessions.create()
        response.set_cookie(config.SESSION_COOKIE, session_id, httponly=True, samesite="lax")
        session = sessions.get(session_id)
    return session


async def push_state(session_id: str, state: ViewState):
    """
    Push the current view model to all WebSocket clients of a session.

    Args:
        session_id: Session whose state changed
        state: The new ViewState
    """
    if session_id not in active_connections:
        return

    view = build_view(state)
    disconnected = set()

    # Snapshot: sockets may disconnect while a send is awaited
    for websocket in list(active_connections.get(session_id, ())):
        try:
            await websocket.send_json(view)
        except Exception as e:
            logger.warning(f"Error pushing state to WebSocket: {e}")
            disconnected.add(websocket)

    # Remove disconnected connections
    for ws in disconnected:
        active_connections.get(session_id, set()).discard(ws)

    # Clean up empty sets
    if session_id in active_connections and not active_connections[session_id]:
        del active_connections[session_id]


@app.get("/")
async def read_root():
    """Serve the single-page front-end."""
    return FileResponse(os.path.join(STATIC_DIR, "index.html"), media_type="text/html")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "model": config.GEMINI_MODEL,
        "api_key_configured": config.get_api_key() is not None,
        "active_sessions": len(sessions.sessions)
    }


@app.get("/api/state")
async def get_state(request: Request, response: Response):
    """Return the view model of the caller's current screen."""
    session = get_session(request, response)
    return build_view(session.state)


@app.post("/api/upload", status_code=202)
async def upload_image(request: Request, response: Response, files: List[UploadFile] = File(...)):
    """
    Accept an image and start analyzing it.

    Only the first file is used. The response is the Analyzing view; the
    Result or Error view follows over the WebSocket (or via GET /api/state)
    once Gemini answers.
    """
    session = get_session(request, response)

    try:
        upload = await capture_upload(files)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    token = await session.start_analysis(upload)
    logger.info(f"Started analysis {token} for '{upload.name}' ({upload.media_type}, {upload.size} bytes)")
    return build_view(session.state)


@app.post("/api/reset")
async def reset(request: Request, response: Response):
    """Back to the landing screen (logo, Detect, Try Again, Analyze Another)."""
    session = get_session(request, response)
    return build_view(await session.reset())


@app.post("/api/faq")
async def show_faq(request: Request, response: Response):
    """Back to the landing screen, scrolled to the FAQ."""
    session = get_session(request, response)
    return build_view(await session.show_faq())


@app.post("/api/history")
async def show_history(request: Request, response: Response):
    """Switch to the history grid."""
    session = get_session(request, response)
    return build_view(await session.show_history())


@app.post("/api/history/{key}")
async def open_history_item(
    request: Request,
    response: Response,
    key: str = Path(..., description="Key of the history entry to reopen")
):
    """
    Reopen a stored result without calling Gemini again.

    Raises:
        404: If no history entry has this key
        409: If the history screen is not the active one
    """
    session = get_session(request, response)

    if find_item(session.state.history, key) is None:
        logger.warning(f"Unknown history item requested: {key}")
        raise HTTPException(
            status_code=404,
            detail=f"History item '{key}' not found"
        )
    if session.state.app_state != AppState.HISTORY:
        raise HTTPException(
            status_code=409,
            detail="History items can only be opened from the history view"
        )

    return build_view(await session.select_history_item(key))


@app.websocket("/ws/session")
async def websocket_session(websocket: WebSocket):
    """
    WebSocket endpoint pushing the view model whenever the session's state
    changes (in particular when a background analysis finishes).
    """
    session_id = websocket.cookies.get(config.SESSION_COOKIE)
    session = sessions.get(session_id)
    if session is None:
        # The page always calls GET /api/state first, which issues the cookie
        await websocket.close(code=4401)
        return

    await websocket.accept()
    logger.info(f"WebSocket client connected for session {session_id[:8]}")

    active_connections.setdefault(session_id, set()).add(websocket)

    # Send the current state immediately
    await websocket.send_json(build_view(session.state))

    try:
        # Keep connection alive and wait for disconnect
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.info(f"WebSocket client disconnected for session {session_id[:8]}")
    finally:
        if session_id in active_connections:
            active_connections[session_id].discard(websocket)
            if not active_connections[session_id]:
                del active_connections[session_id]


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
