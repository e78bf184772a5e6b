# influencer_iq/web/server.py
"""
FastAPI web server for InfluencerIQ.

Serves the search page, the leaderboard and the JSON API used by other
clients (analysis relay + rankings store).

Run with: python -m influencer_iq.web.server
"""
import time
from pathlib import Path

import markdown
from fastapi import FastAPI, Form, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from markupsafe import escape
from pydantic import ValidationError

from influencer_iq.main import load_config, make_relay
from influencer_iq.pipeline.analyze_influencer import analyze_influencer
from influencer_iq.pipeline.enrich import ALL_PLATFORMS, PLATFORMS
from influencer_iq.pipeline.relay import RelayInputError, to_completion_payload
from influencer_iq.schemas.ranking import RankingSubmission
from influencer_iq.store.rankings import MissingFieldsError, RankingsStore, make_rankings_store
from influencer_iq.tools.logger import make_logger

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

WEB_DIR = Path(__file__).parent
TEMPLATES_DIR = WEB_DIR / "templates"
STATIC_DIR = WEB_DIR / "static"

POPULAR_INFLUENCERS = [
    {"name": "MrBeast", "platform": "YouTube"},
    {"name": "Charli D'Amelio", "platform": "TikTok"},
    {"name": "Cristiano Ronaldo", "platform": "Instagram"},
    {"name": "Lilly Singh", "platform": "YouTube"},
    {"name": "Bhuvan Bam", "platform": "YouTube"},
]

log = make_logger("web")
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def _render_markdown(text: str) -> str:
    # Model output is untrusted: escape raw HTML, keep the markdown formatting
    return markdown.markdown(str(escape(text or "")), extensions=["fenced_code"])


templates.env.filters["markdown"] = _render_markdown


def create_app(cfg: dict | None = None, store: RankingsStore | None = None, chat=None) -> FastAPI:
    """Build the app around one rankings store and one relay for the process."""
    cfg = cfg or load_config()
    app = FastAPI(title="InfluencerIQ")
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.state.cfg = cfg
    app.state.store = store if store is not None else make_rankings_store(cfg)
    app.state.relay = make_relay(cfg, chat=chat)
    app.state.started_ms = int(time.time() * 1000)

    # -----------------------------------------------------------------------
    # Pages
    # -----------------------------------------------------------------------

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request, name: str = "", platform: str = ALL_PLATFORMS):
        """Search form with recent analyses."""
        return templates.TemplateResponse(request, "index.html", {
            "name": name,
            "platform": platform,
            "platforms": [ALL_PLATFORMS] + PLATFORMS,
            "popular": POPULAR_INFLUENCERS,
            "history": app.state.store.read_all().results,
            "report": None,
            "error": "",
        })

    @app.post("/analyze", response_class=HTMLResponse)
    def analyze(request: Request, name: str = Form(""), platform: str = Form(ALL_PLATFORMS)):
        """Run an analysis for the submitted name and render the result."""
        report = None
        error = ""
        status_code = 200
        try:
            report = analyze_influencer(name, app.state.relay, app.state.store, platform=platform)
        except ValueError as e:
            error = str(e)
            status_code = 400

        history = report.rankings if report else app.state.store.read_all().results
        return templates.TemplateResponse(request, "index.html", {
            "name": name,
            "platform": platform,
            "platforms": [ALL_PLATFORMS] + PLATFORMS,
            "popular": POPULAR_INFLUENCERS,
            "history": history,
            "report": report,
            "error": error,
        }, status_code=status_code)

    @app.get("/leaderboard", response_class=HTMLResponse)
    async def leaderboard(request: Request, platform: str = "all"):
        """Ranked table with a platform filter."""
        results = app.state.store.read_all().results
        platforms = ["all"] + list(dict.fromkeys(r.platform.lower() for r in results))
        selected = (platform or "all").lower()
        if selected != "all":
            results = [r for r in results if r.platform.lower() == selected]
        return templates.TemplateResponse(request, "rankings.html", {
            "results": results,
            "platforms": platforms,
            "selected": selected,
        })

    @app.get("/about", response_class=HTMLResponse)
    async def about(request: Request):
        return templates.TemplateResponse(request, "about.html", {})

    # -----------------------------------------------------------------------
    # JSON API
    # -----------------------------------------------------------------------

    @app.post("/analysis-relay")
    async def analysis_relay(request: Request):
        """Forward a prompt to the completion API; always success-shaped once the prompt is valid."""
        try:
            body = await request.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            return JSONResponse({"error": {"message": "A valid prompt is required"}}, status_code=400)

        result = await run_in_threadpool(
            app.state.relay, body.get("prompt"), bool(body.get("structured", False))
        )
        if isinstance(result, RelayInputError):
            return JSONResponse({"error": {"message": result.reason}}, status_code=400)
        return to_completion_payload(result)

    @app.get("/rankings")
    async def get_rankings(nocache: str = ""):
        # nocache is advisory; results are always live
        log.debug(f"Rankings GET request, force refresh: {nocache == 'true'}")
        try:
            snapshot = app.state.store.read_all()
        except Exception as e:
            log.error(f"Rankings GET error: {type(e).__name__}: {e}")
            return JSONResponse(
                {"error": "Failed to retrieve rankings", "details": str(e)},
                status_code=500,
            )
        return {
            "results": [r.to_wire() for r in snapshot.results],
            "timestamp": snapshot.timestamp,
            "serverUptime": snapshot.timestamp - app.state.started_ms,
        }

    @app.post("/rankings")
    async def post_rankings(request: Request):
        try:
            body = await request.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            return JSONResponse({"error": "Missing required fields"}, status_code=400)

        try:
            submission = RankingSubmission.model_validate(body)
            result = app.state.store.upsert(submission)
        except (MissingFieldsError, ValidationError) as e:
            log.warning(f"Rejected rankings submission: {e}")
            msg = str(e) if isinstance(e, MissingFieldsError) else "Invalid analysis data"
            return JSONResponse({"error": msg}, status_code=400)
        except Exception as e:
            log.error(f"Rankings API error: {type(e).__name__}: {e}")
            return JSONResponse({"error": f"Failed to save analysis: {e}"}, status_code=500)

        return {
            "success": True,
            "id": result.id,
            "timestamp": result.timestamp,
            "message": result.message,
            "currentCount": result.count,
        }

    return app


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def serve(cfg: dict | None = None, host: str | None = None, port: int | None = None):
    import uvicorn
    cfg = cfg or load_config()
    host = host or cfg["web"]["host"]
    port = port or cfg["web"]["port"]
    print(f"Starting InfluencerIQ at http://localhost:{port}")
    uvicorn.run(create_app(cfg), host=host, port=port, log_level="info")


def main():
    serve()


if __name__ == "__main__":
    main()
