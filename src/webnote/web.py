from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse, Response

from .codec import DEFAULT_ENCODING
from .dialog import FixedSaveDialog, SaveDialog, TkSaveDialog
from .document import UNTITLED_TITLE, DocumentService
from .path_cell import FilePathCell
from .web_assets import WEBNOTE_FAVICON_SVG, WEBNOTE_FAVICON_URL


@dataclass(slots=True)
class WebConfig:
    path: Path | None = None
    encoding: str = DEFAULT_ENCODING
    host: str = "127.0.0.1"
    port: int = 3000
    save_as: Path | None = None


INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Untitled - webnote</title>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <link rel="icon" type="image/svg+xml" href="__WEBNOTE_FAVICON__">
  <style>
    :root {
      color-scheme: light dark;
      font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", "Hiragino Sans", "Microsoft YaHei", sans-serif;
      --bg: #fafaf9;
      --panel: #ffffff;
      --outline: #e7e5e4;
      --text: #1c1917;
      --muted: #78716c;
      --accent: #d97706;
      --ok: #16a34a;
      --danger: #dc2626;
    }
    @media (prefers-color-scheme: dark) {
      :root {
        --bg: #0c0a09;
        --panel: #1c1917;
        --outline: #292524;
        --text: #f5f5f4;
        --muted: #a8a29e;
      }
    }
    * {
      box-sizing: border-box;
    }
    body {
      margin: 0;
      background: var(--bg);
      color: var(--text);
      height: 100vh;
      display: flex;
      flex-direction: column;
    }
    header {
      display: flex;
      align-items: center;
      gap: 0.75rem;
      padding: 0.6rem 1rem;
      border-bottom: 1px solid var(--outline);
      background: var(--panel);
    }
    header h1 {
      margin: 0;
      font-size: 1rem;
      font-weight: 600;
      flex: 1;
      overflow: hidden;
      text-overflow: ellipsis;
      white-space: nowrap;
    }
    .dot {
      width: 0.6rem;
      height: 0.6rem;
      border-radius: 50%;
      background: var(--muted);
      flex: none;
    }
    .dot.saved {
      background: var(--ok);
    }
    .dot.dirty {
      background: var(--accent);
    }
    .status {
      color: var(--muted);
      font-size: 0.8rem;
    }
    button {
      border: 1px solid var(--outline);
      background: transparent;
      color: var(--text);
      border-radius: 8px;
      padding: 0.3rem 0.9rem;
      font-size: 0.85rem;
      cursor: pointer;
    }
    button:hover {
      border-color: var(--accent);
    }
    .banner {
      display: none;
      padding: 0.5rem 1rem;
      background: rgba(220,38,38,0.12);
      color: var(--danger);
      font-size: 0.85rem;
      border-bottom: 1px solid var(--outline);
    }
    .banner.visible {
      display: flex;
      gap: 0.75rem;
      align-items: center;
    }
    .banner span {
      flex: 1;
    }
    textarea {
      flex: 1;
      width: 100%;
      border: none;
      resize: none;
      outline: none;
      padding: 1rem 1.2rem;
      background: var(--bg);
      color: var(--text);
      font-family: ui-monospace, "SF Mono", Menlo, Consolas, monospace;
      font-size: 0.95rem;
      line-height: 1.55;
      tab-size: 4;
    }
    textarea[readonly] {
      color: var(--muted);
    }
  </style>
</head>
<body>
  <header>
    <span class="dot" id="saved-dot" title="Not saved"></span>
    <h1 id="title">Untitled</h1>
    <span class="status" id="status"></span>
    <button type="button" id="save-btn">Save</button>
  </header>
  <div class="banner" id="banner">
    <span id="banner-text"></span>
    <button type="button" id="unlock-btn">Start blank</button>
    <button type="button" id="reload-btn">Reload</button>
  </div>
  <textarea id="editor" spellcheck="false" autofocus></textarea>
  <script>
    (() => {
      const editor = document.getElementById('editor');
      const titleEl = document.getElementById('title');
      const dotEl = document.getElementById('saved-dot');
      const statusEl = document.getElementById('status');
      const bannerEl = document.getElementById('banner');
      const bannerText = document.getElementById('banner-text');
      const state = { title: 'Untitled', saved: false, dirty: false, saving: false };

      function render() {
        titleEl.textContent = state.title;
        dotEl.classList.toggle('saved', state.saved && !state.dirty);
        dotEl.classList.toggle('dirty', state.dirty);
        dotEl.title = state.dirty ? 'Unsaved changes' : (state.saved ? 'Saved' : 'Not saved');
        document.title = `${state.dirty ? '● ' : ''}${state.title} - webnote`;
      }

      function showBanner(message, locked) {
        bannerText.textContent = message;
        bannerEl.classList.add('visible');
        document.getElementById('unlock-btn').style.display = locked ? '' : 'none';
        editor.readOnly = Boolean(locked);
      }

      function hideBanner() {
        bannerEl.classList.remove('visible');
        editor.readOnly = false;
      }

      function applyDocument(data) {
        state.title = data.title;
        state.saved = data.saved;
        render();
      }

      function loadContent() {
        return fetch('/api/content')
          .then((res) => res.json())
          .then((data) => {
            editor.value = data.content;
            state.dirty = false;
            applyDocument(data);
            if (data.error === 'decode' || data.error === 'read') {
              // Saving now would replace the file with the error text.
              showBanner(data.detail || data.content, true);
            } else if (data.error === 'not_found') {
              editor.value = '';
              showBanner('File does not exist yet; it will be created on save.', false);
            } else {
              hideBanner();
            }
          })
          .catch((err) => {
            console.error(err);
            showBanner(`Failed to load note: ${err.message}`, false);
          });
      }

      function saveContent() {
        if (state.saving || editor.readOnly) return;
        state.saving = true;
        statusEl.textContent = 'Saving…';
        const body = { content: editor.value, title: state.title, saved: state.saved };
        fetch('/api/content', {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify(body),
        })
          .then((res) => res.json())
          .then((data) => {
            if (data.saved) {
              state.dirty = editor.value !== body.content;
              hideBanner();
              statusEl.textContent = 'Saved';
            } else if (data.error) {
              showBanner(data.detail || `Save failed (${data.error})`, false);
              statusEl.textContent = 'Not saved';
            } else {
              statusEl.textContent = 'Save cancelled';
            }
            applyDocument(data);
          })
          .catch((err) => {
            console.error(err);
            showBanner(`Failed to save note: ${err.message}`, false);
            statusEl.textContent = 'Not saved';
          })
          .finally(() => {
            state.saving = false;
          });
      }

      function pollStatus() {
        fetch('/api/status')
          .then((res) => {
            if (!res.ok) throw new Error(res.statusText);
            if (statusEl.textContent === 'Server offline') statusEl.textContent = '';
          })
          .catch(() => {
            statusEl.textContent = 'Server offline';
          });
      }

      editor.addEventListener('input', () => {
        state.dirty = true;
        render();
      });
      document.addEventListener('keydown', (event) => {
        if ((event.ctrlKey || event.metaKey) && event.key.toLowerCase() === 's') {
          event.preventDefault();
          saveContent();
        }
      });
      window.addEventListener('beforeunload', (event) => {
        if (state.dirty) {
          event.preventDefault();
          event.returnValue = '';
        }
      });
      document.getElementById('save-btn').addEventListener('click', saveContent);
      document.getElementById('reload-btn').addEventListener('click', loadContent);
      document.getElementById('unlock-btn').addEventListener('click', () => {
        editor.value = '';
        hideBanner();
        editor.focus();
      });

      render();
      loadContent();
      setInterval(pollStatus, 5000);
    })();
  </script>
</body>
</html>
"""


def _default_dialog(config: WebConfig) -> SaveDialog:
    if config.save_as is not None:
        return FixedSaveDialog(config.save_as)
    initial_dir = config.path.parent if config.path is not None else None
    return TkSaveDialog(initial_dir=initial_dir)


def create_app(config: WebConfig, *, dialog: SaveDialog | None = None) -> FastAPI:
    path_cell = FilePathCell(config.path)
    service = DocumentService(
        path_cell,
        dialog if dialog is not None else _default_dialog(config),
        encoding=config.encoding,
    )

    app = FastAPI(title="webnote")
    app.state.config = config
    app.state.service = service

    @app.get("/", response_class=HTMLResponse)
    def index() -> HTMLResponse:
        return HTMLResponse(INDEX_HTML.replace("__WEBNOTE_FAVICON__", WEBNOTE_FAVICON_URL))

    @app.get("/favicon.svg")
    def favicon() -> Response:
        return Response(WEBNOTE_FAVICON_SVG, media_type="image/svg+xml")

    @app.get("/api/status")
    def api_status() -> JSONResponse:
        return JSONResponse(
            {
                "status": "ok",
                "encoding": service.encoding,
                "has_path": path_cell.is_set,
            }
        )

    @app.get("/api/content")
    async def api_load() -> JSONResponse:
        document = await service.load()
        return JSONResponse(document.to_payload())

    @app.post("/api/content")
    async def api_save(payload: dict[str, object] = Body(...)) -> JSONResponse:
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid payload.")
        content = payload.get("content")
        if not isinstance(content, str):
            raise HTTPException(status_code=400, detail="content must be a string.")
        title = payload.get("title")
        if not isinstance(title, str):
            title = UNTITLED_TITLE
        document = await service.save(content, title)
        return JSONResponse(document.to_payload())

    return app


__all__ = ["INDEX_HTML", "WebConfig", "create_app"]
