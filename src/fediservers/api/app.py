"""FastAPI application entrypoint."""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import HTMLResponse

from fediservers.api.routes import router
from fediservers.datastore import resolve_data_root

INDEX_HTML = """
<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>NeoDB Servers API</title>
    <style>
      :root {
        color-scheme: light;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
      }

      body {
        margin: 0 auto;
        max-width: 720px;
        padding: 48px 24px;
        line-height: 1.6;
      }

      code {
        font-size: 0.95em;
      }
    </style>
  </head>
  <body>
    <h1>NeoDB Servers API</h1>
    <p>Read-only directory of NeoDB and Mastodon-compatible servers.</p>
    <h2>Available endpoints</h2>
    <ul>
      <li><a href="/servers"><code>GET /servers</code></a> - all servers, official first</li>
      <li><a href="/servers/official"><code>GET /servers/official</code></a> - official servers</li>
      <li><a href="/servers/community"><code>GET /servers/community</code></a> - community servers</li>
      <li><a href="/servers/schema"><code>GET /servers/schema</code></a> - JSON schema of a server entry</li>
    </ul>
  </body>
</html>
"""


def create_app(data_root: str | Path | None = None) -> FastAPI:
    app = FastAPI(title="NeoDB Servers", description="Read-only server directory API")
    app.state.data_root = resolve_data_root(data_root)
    app.include_router(router)

    @app.get("/", response_class=HTMLResponse)
    async def index() -> str:
        return INDEX_HTML

    return app


app = create_app()
