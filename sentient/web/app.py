"""
FastAPI Web Application - Sentient Dashboard
============================================

Web UI for analyzing customer reviews with Gemini and chatting about the
result. Pages are rendered server-side; every form POST redirects back to
the dashboard (303) so a refresh never resubmits.
"""

import logging
from contextlib import asynccontextmanager
from html import escape
from typing import Optional

from fastapi import FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel

from ..application import DashboardController, build_controller
from ..domain import AnalysisResult, ChatMessage
from ..infrastructure.config import get_settings
from .charts import render_trend_chart, render_word_cloud

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════
#  SHARED CSS
# ══════════════════════════════════════════════════════════════════

SHARED_CSS = """
    @import url('https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700;800&display=swap');

    :root {
        --bg: #f8fafc;
        --card: #ffffff;
        --border: #e2e8f0;
        --text: #0f172a;
        --text-muted: #64748b;
        --accent: #4f46e5;
        --accent-hover: #4338ca;
        --gradient: linear-gradient(90deg, #4f46e5 0%, #7c3aed 100%);
    }

    * { margin: 0; padding: 0; box-sizing: border-box; }

    body {
        font-family: 'Inter', -apple-system, BlinkMacSystemFont, sans-serif;
        background: var(--bg);
        color: var(--text);
        min-height: 100vh;
        padding-bottom: 80px;
    }

    @keyframes fadeInUp {
        from { opacity: 0; transform: translateY(16px); }
        to   { opacity: 1; transform: translateY(0); }
    }
    @keyframes spin { to { transform: rotate(360deg); } }

    .card {
        background: var(--card);
        border: 1px solid var(--border);
        border-radius: 16px;
        padding: 24px;
        box-shadow: 0 1px 2px rgba(15,23,42,0.04);
        animation: fadeInUp 0.4s ease-out both;
    }
    .card h2 { font-size: 18px; font-weight: 600; margin-bottom: 16px; }

    .btn {
        background: var(--accent);
        color: #fff;
        border: none;
        padding: 12px 24px;
        border-radius: 12px;
        font-weight: 500;
        font-size: 14px;
        cursor: pointer;
        font-family: inherit;
        transition: background 0.2s ease;
    }
    .btn:hover { background: var(--accent-hover); }
    .btn:disabled { opacity: 0.5; cursor: not-allowed; }
    .btn-block { width: 100%; margin-top: 16px; }
    .btn-link {
        background: none; border: none; color: var(--accent);
        font-size: 12px; font-weight: 500; cursor: pointer; font-family: inherit;
    }

    .alert {
        padding: 12px 16px;
        border-radius: 10px;
        margin-top: 16px;
        font-size: 14px;
    }
    .alert-error { background: #fff1f2; color: #be123c; }

    textarea, input[type="text"] {
        width: 100%;
        background: var(--bg);
        border: 1px solid var(--border);
        border-radius: 12px;
        padding: 14px;
        font-size: 14px;
        font-family: inherit;
        color: var(--text);
    }
    textarea { height: 256px; resize: none; }
    textarea:focus, input:focus { outline: none; box-shadow: 0 0 0 2px var(--accent); border-color: transparent; }

    .empty-state { color: var(--text-muted); text-align: center; padding: 24px; font-size: 14px; }
"""


# ══════════════════════════════════════════════════════════════════
#  HTML TEMPLATE RENDERERS
# ══════════════════════════════════════════════════════════════════

def render_summary(result: AnalysisResult) -> str:
    areas = "".join(
        f"""
        <div class="area">
            <span class="area-num">{i}</span>
            <p>{escape(area)}</p>
        </div>"""
        for i, area in enumerate(result.top_actionable_areas, start=1)
    )
    score = result.overall_sentiment
    tone = "positive" if score > 0 else "negative" if score < 0 else "neutral"
    return f"""
        <div class="card">
            <h2>Executive Summary <span class="score {tone}">{score:g}</span></h2>
            <p class="summary">{escape(result.executive_summary)}</p>
            <div class="areas">{areas}</div>
        </div>
        <div class="charts">
            <div class="card">
                <h2>Sentiment Trend</h2>
                {render_trend_chart(result.sentiment_trend)}
            </div>
            <div class="card">
                <h2>Key Themes</h2>
                {render_word_cloud(result.word_cloud)}
            </div>
        </div>"""


def render_chat_message(message: ChatMessage) -> str:
    side = "user" if message.is_user else "assistant"
    return f'<div class="bubble-row {side}"><div class="bubble {side}">{escape(message.text)}</div></div>'


def render_chat_widget(controller: DashboardController) -> str:
    chat = controller.chat
    fab_icon = "&times;" if chat.is_open else "&#128172;"
    fab = f"""
        <form method="post" action="/chat/toggle">
            <button type="submit" class="fab" title="AI Assistant">{fab_icon}</button>
        </form>"""
    if not chat.is_open:
        return f'<div class="chat-dock">{fab}</div>'

    bubbles = "".join(render_chat_message(m) for m in chat.messages)
    if chat.is_waiting:
        bubbles += '<div class="bubble-row assistant"><div class="bubble assistant thinking">Thinking...</div></div>'
    disabled = " disabled" if chat.is_waiting else ""

    return f"""
    <div class="chat-dock">
        <div class="chat-panel">
            <div class="chat-header">&#10024; AI Assistant</div>
            <div class="chat-messages" id="chat-messages">{bubbles}</div>
            <form method="post" action="/chat/send" class="chat-input" data-busy="Sending...">
                <input type="text" name="message" placeholder="Ask about the sentiment..." autocomplete="off" required>
                <button type="submit" class="btn"{disabled}>Send</button>
            </form>
        </div>
        {fab}
    </div>"""


def render_dashboard(controller: DashboardController) -> str:
    """Render the main dashboard page."""
    result = controller.result

    error_html = f'<div class="alert alert-error">{escape(controller.error)}</div>' if controller.error else ""

    if result is None:
        body = """
        <div class="card ready">
            <div class="ready-icon">&#128202;</div>
            <p class="ready-title">Ready to analyze</p>
            <p>Paste reviews and click Analyze to generate the dashboard</p>
        </div>"""
    else:
        body = render_summary(result)

    analyze_label = "Deep Thinking Analysis..." if controller.is_analyzing else "Analyze Reviews"
    analyze_disabled = " disabled" if controller.is_analyzing else ""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Sentient Dashboard</title>
    <style>
        {SHARED_CSS}

        header {{
            background: var(--card); border-bottom: 1px solid var(--border);
            position: sticky; top: 0; z-index: 30;
        }}
        .header-inner {{
            max-width: 1280px; margin: 0 auto; padding: 0 24px; height: 64px;
            display: flex; align-items: center; justify-content: space-between;
        }}
        .logo {{
            font-size: 20px; font-weight: 700;
            background: var(--gradient);
            -webkit-background-clip: text; -webkit-text-fill-color: transparent;
        }}
        .powered {{ font-size: 13px; color: var(--text-muted); }}

        main {{
            max-width: 1280px; margin: 0 auto; padding: 32px 24px;
            display: grid; grid-template-columns: 1fr 2fr; gap: 32px;
        }}
        @media (max-width: 960px) {{ main {{ grid-template-columns: 1fr; }} }}
        .results {{ display: flex; flex-direction: column; gap: 24px; }}

        .input-head {{ display: flex; justify-content: space-between; align-items: center; margin-bottom: 16px; }}
        .input-head h2 {{ margin: 0; }}

        .ready {{
            min-height: 400px; display: flex; flex-direction: column;
            align-items: center; justify-content: center;
            border: 2px dashed var(--border); background: rgba(255,255,255,0.5);
            color: #94a3b8; font-size: 14px;
        }}
        .ready-icon {{ font-size: 56px; opacity: 0.5; margin-bottom: 12px; }}
        .ready-title {{ font-size: 18px; font-weight: 500; }}

        .summary {{ color: #475569; line-height: 1.7; }}
        .score {{ font-size: 13px; padding: 2px 10px; border-radius: 999px; margin-left: 8px; vertical-align: middle; }}
        .score.positive {{ background: #ecfdf5; color: #059669; }}
        .score.negative {{ background: #fff1f2; color: #e11d48; }}
        .score.neutral  {{ background: #f1f5f9; color: #475569; }}

        .areas {{ margin-top: 24px; display: grid; grid-template-columns: repeat(3, 1fr); gap: 16px; }}
        .area {{
            background: #fffbeb; border: 1px solid #fef3c7; border-radius: 12px;
            padding: 16px; display: flex; gap: 12px; align-items: flex-start;
        }}
        .area p {{ font-size: 14px; font-weight: 500; color: #78350f; }}
        .area-num {{
            flex-shrink: 0; width: 24px; height: 24px; border-radius: 50%;
            background: #fde68a; color: #92400e; font-size: 12px; font-weight: 700;
            display: flex; align-items: center; justify-content: center;
        }}

        .charts {{ display: grid; grid-template-columns: 1fr 1fr; gap: 24px; }}
        @media (max-width: 960px) {{ .charts, .areas {{ grid-template-columns: 1fr; }} }}

        .trend-chart {{ width: 100%; height: 256px; }}
        .trend-chart .grid {{ stroke: #e2e8f0; stroke-dasharray: 3 3; }}
        .trend-chart .axis {{ fill: #64748b; font-size: 12px; }}
        .trend-chart .line {{ fill: none; stroke: #6366f1; stroke-width: 3; }}
        .trend-chart .dot {{ fill: #6366f1; }}

        .word-cloud {{
            display: flex; flex-wrap: wrap; gap: 8px; padding: 16px;
            justify-content: center; align-items: center;
            background: var(--bg); border: 1px solid #f1f5f9; border-radius: 12px; min-height: 256px;
        }}
        .word {{ padding: 4px 12px; border-radius: 999px; font-weight: 500; cursor: default; }}
        .word.positive {{ color: #059669; background: #ecfdf5; }}
        .word.negative {{ color: #e11d48; background: #fff1f2; }}
        .word.neutral  {{ color: #475569; background: #f1f5f9; }}

        .chat-dock {{ position: fixed; bottom: 24px; right: 24px; z-index: 50; display: flex; flex-direction: column; align-items: flex-end; gap: 16px; }}
        .fab {{
            width: 56px; height: 56px; border-radius: 50%; border: none; cursor: pointer;
            background: var(--accent); color: #fff; font-size: 22px;
            box-shadow: 0 10px 15px -3px rgba(79,70,229,0.3);
        }}
        .chat-panel {{
            width: 384px; height: 500px; background: var(--card); border: 1px solid var(--border);
            border-radius: 16px; box-shadow: 0 25px 50px -12px rgba(15,23,42,0.25);
            display: flex; flex-direction: column; overflow: hidden; animation: fadeInUp 0.3s ease-out;
        }}
        .chat-header {{ background: var(--gradient); color: #fff; padding: 16px; font-weight: 600; }}
        .chat-messages {{ flex: 1; overflow-y: auto; padding: 16px; background: var(--bg); display: flex; flex-direction: column; gap: 12px; }}
        .bubble-row {{ display: flex; }}
        .bubble-row.user {{ justify-content: flex-end; }}
        .bubble {{ max-width: 80%; padding: 12px; border-radius: 16px; font-size: 14px; line-height: 1.5; }}
        .bubble.user {{ background: var(--accent); color: #fff; border-bottom-right-radius: 0; }}
        .bubble.assistant {{ background: var(--card); color: #334155; border: 1px solid #f1f5f9; border-bottom-left-radius: 0; }}
        .bubble.thinking {{ color: var(--text-muted); font-size: 12px; }}
        .chat-input {{ display: flex; gap: 8px; padding: 16px; border-top: 1px solid #f1f5f9; }}
        .chat-input input {{ border-radius: 999px; padding: 8px 16px; }}
        .chat-input .btn {{ border-radius: 999px; padding: 8px 16px; }}
    </style>
</head>
<body>
    <header>
        <div class="header-inner">
            <span class="logo">Sentient Dashboard</span>
            <span class="powered">Powered by Gemini</span>
        </div>
    </header>

    <main>
        <section>
            <div class="card">
                <div class="input-head">
                    <h2>Input Data</h2>
                    <form method="post" action="/sample">
                        <button type="submit" class="btn-link">Load Sample</button>
                    </form>
                </div>
                <form method="post" action="/analyze" data-busy="Deep Thinking Analysis...">
                    <textarea name="reviews" placeholder="Paste customer reviews here...">{escape(controller.input_text)}</textarea>
                    <button type="submit" class="btn btn-block"{analyze_disabled}>{analyze_label}</button>
                </form>
                {error_html}
            </div>
        </section>

        <section class="results">
            {body}
        </section>
    </main>

    {render_chat_widget(controller)}

    <script>
        document.querySelectorAll('form[data-busy]').forEach(function(form) {{
            form.addEventListener('submit', function() {{
                const btn = form.querySelector('button[type=submit]');
                btn.textContent = form.dataset.busy;
                btn.disabled = true;
            }});
        }});
        const log = document.getElementById('chat-messages');
        if (log) {{ log.scrollTop = log.scrollHeight; }}
    </script>
</body>
</html>"""


# ══════════════════════════════════════════════════════════════════
#  APP FACTORY & ROUTES
# ══════════════════════════════════════════════════════════════════

class AnalyzeRequest(BaseModel):
    text: str


class ChatRequest(BaseModel):
    message: str


def _state_payload(controller: DashboardController) -> dict:
    snapshot = controller.snapshot
    return {
        "result": snapshot.result.to_dict() if snapshot else None,
        "snapshotId": snapshot.snapshot_id if snapshot else None,
        "isAnalyzing": controller.is_analyzing,
        "error": controller.error,
    }


def _chat_payload(controller: DashboardController) -> dict:
    chat = controller.chat
    return {
        "messages": [m.to_dict() for m in chat.messages],
        "isWaiting": chat.is_waiting,
        "isActive": chat.is_active,
    }


def create_app(controller: Optional[DashboardController] = None) -> FastAPI:
    """Build the FastAPI app around a controller (a real one by default)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        for issue in get_settings().validate():
            logger.warning(issue)
        logger.info("Dashboard ready")
        yield

    app = FastAPI(
        title="Sentient Dashboard",
        description="Customer review analysis powered by Gemini",
        lifespan=lifespan,
    )
    app.state.controller = controller or build_controller()

    def _controller(request: Request) -> DashboardController:
        return request.app.state.controller

    # ── Dashboard ──────────────────────────────────────────────

    @app.get("/", response_class=HTMLResponse)
    async def dashboard(request: Request):
        return render_dashboard(_controller(request))

    @app.post("/analyze")
    async def analyze(request: Request, reviews: str = Form("")):
        await _controller(request).analyze(reviews)
        return RedirectResponse(url="/", status_code=303)

    @app.post("/sample")
    async def load_sample(request: Request):
        _controller(request).load_sample()
        return RedirectResponse(url="/", status_code=303)

    # ── Chat Overlay ───────────────────────────────────────────

    @app.post("/chat/toggle")
    async def toggle_chat(request: Request):
        _controller(request).chat.toggle()
        return RedirectResponse(url="/", status_code=303)

    @app.post("/chat/send")
    async def send_chat(request: Request, message: str = Form("")):
        await _controller(request).chat.send(message)
        return RedirectResponse(url="/", status_code=303)

    # ── API Endpoints ──────────────────────────────────────────

    @app.get("/api/analysis")
    async def api_analysis(request: Request):
        return _state_payload(_controller(request))

    @app.post("/api/analyze")
    async def api_analyze(request: Request, body: AnalyzeRequest):
        controller = _controller(request)
        if not body.text.strip():
            raise HTTPException(status_code=400, detail="Review text must not be empty")

        snapshot = await controller.analyze(body.text)
        if snapshot is None and controller.error:
            raise HTTPException(status_code=502, detail=controller.error)
        return _state_payload(controller)

    @app.get("/api/chat/messages")
    async def api_chat_messages(request: Request):
        return _chat_payload(_controller(request))

    @app.post("/api/chat")
    async def api_chat(request: Request, body: ChatRequest):
        controller = _controller(request)
        if not body.message.strip():
            raise HTTPException(status_code=400, detail="Message must not be empty")

        reply = await controller.chat.send(body.message)
        return {"reply": reply.text if reply else None, **_chat_payload(controller)}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    server = get_settings().server
    uvicorn.run(app, host=server.host, port=server.port, log_level=server.log_level)
