"""Mounted dispatchers: a small API composed from independent pieces.

Demonstrates:
- Function handlers (timing: adds X-Response-Time header)
- Class handlers (token check: fails the request with 401)
- Nested dispatchers mounted at /api and /api/admin
- Inline error handlers that answer JSON for anything under /api

Run:
    cd examples/mounted && python app.py
"""

import json
import time

from junction import Dispatcher, HTTPError, NotFound, Request, ResponseWriter
from junction.middleware import Next

app = Dispatcher()
api = Dispatcher()
admin = Dispatcher()

USERS = {"1": {"id": 1, "name": "Ada"}, "2": {"id": 2, "name": "Grace"}}


async def send_json(response: ResponseWriter, payload: object, status: int = 200) -> None:
    response.status = status
    response.set_header("Content-Type", "application/json")
    await response.end(json.dumps(payload))


# ---------------------------------------------------------------------------
# Function handler: timing
# ---------------------------------------------------------------------------


async def timing(request: Request, response: ResponseWriter, next: Next) -> None:
    """Stamp every response with how long the chain took to reach it."""
    request.state.started = time.monotonic()
    await next()


def stamp(response: ResponseWriter, request: Request) -> None:
    elapsed = time.monotonic() - request.state.started
    response.set_header("X-Response-Time", f"{elapsed:.3f}s")


# ---------------------------------------------------------------------------
# Class handler: token check
# ---------------------------------------------------------------------------


class RequireToken:
    """Reject requests without the expected bearer token."""

    def __init__(self, token: str) -> None:
        self.token = token

    async def __call__(self, request: Request, response: ResponseWriter, next: Next) -> None:
        if request.headers.get("authorization") != f"Bearer {self.token}":
            await next(HTTPError(status=401, detail="missing or bad token"))
            return
        await next()


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


@api.handler("/users")
async def users(request: Request, response: ResponseWriter, next: Next) -> None:
    user_id = request.path.strip("/")
    if not user_id:
        stamp(response, request)
        await send_json(response, list(USERS.values()))
        return
    if user_id not in USERS:
        raise NotFound(f"no user {user_id}")
    stamp(response, request)
    await send_json(response, USERS[user_id])


admin.use(RequireToken("s3cr3t"))


@admin.handler("/stats")
async def stats(request: Request, response: ResponseWriter, next: Next) -> None:
    stamp(response, request)
    await send_json(response, {"users": len(USERS), "mounted_at": request.base_path})


api.use("/admin", admin)


@api.error()
async def api_errors(error: object, request: Request, response: ResponseWriter, next: Next) -> None:
    if not isinstance(error, HTTPError):
        await next(error)
        return
    await send_json(response, {"error": error.detail, "status": error.status}, error.status)


app.use(timing)
app.use("/api", api)


@app.handler("/")
async def index(request: Request, response: ResponseWriter, next: Next) -> None:
    if request.path != "/":
        await next()
        return
    response.set_header("Content-Type", "text/plain; charset=utf-8")
    await response.end("try /api/users")


if __name__ == "__main__":
    app.listen()
