"""
Relay Server

FastAPI server that receives issue-update snapshots from a host-side hook
and relays them to the webhook endpoint.

Endpoints:
- POST /issues/changed: Host snapshot of one committed update
- GET /health: Health check
- GET /rule: Rule title and field requirements

Pipeline:
1. Receive snapshot
2. Verify signature (if a secret is configured)
3. Parse into a ChangeContext
4. Detect changes, build payload
5. Dispatch to the webhook if anything changed
"""

import json
import logging
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, HTTPException, Header
from fastapi.responses import JSONResponse
from fastapi.concurrency import run_in_threadpool

from ..common.config import load_config, NotifierConfig
from .directory import UserDirectory
from .handlers import SnapshotHandler
from .pipeline import ChangeNotificationRule


# Global state
config: Optional[NotifierConfig] = None
rule: Optional[ChangeNotificationRule] = None
snapshot_handler: Optional[SnapshotHandler] = None


def init_components(cfg: NotifierConfig) -> None:
    """Build the rule and handler from configuration"""
    global config, rule, snapshot_handler

    config = cfg
    rule = ChangeNotificationRule.from_config(cfg)

    directory = UserDirectory(cfg.directory.users)
    snapshot_handler = SnapshotHandler(
        directory=directory,
        signing_secret=cfg.relay.signing_secret,
    )
    print(f"[Notifier] Directory: {len(directory)} users")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize components on startup, unless run_server already did"""
    print("[Notifier] Starting up...")

    if rule is None:
        init_components(load_config())
    print(f"[Notifier] Webhook: {config.webhook.url} (timeout: {config.webhook.timeout_ms} ms)")
    print(f"[Notifier] Emission policy: {config.policy.value}")
    print("[Notifier] Ready to receive updates")

    yield

    print("[Notifier] Shutting down...")


app = FastAPI(
    title="Issue Change Notifier",
    description="Relays issue updates to a webhook as normalized change events",
    version="0.1.0",
    lifespan=lifespan
)


# =============================================================================
# Endpoints
# =============================================================================

@app.get("/health")
def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "notifier",
        "initialized": rule is not None,
        "emission_policy": rule.detector.policy.value if rule else None,
        "webhook_configured": bool(config and config.webhook.url),
    }


@app.get("/rule")
def rule_description():
    """Rule title and the fields the host must track"""
    return ChangeNotificationRule.describe()


@app.post("/issues/changed")
async def issue_changed(
    request: Request,
    x_notifier_signature: Optional[str] = Header(None),
):
    """
    Handle one committed issue update.

    The relay pipeline is synchronous (its only blocking step is the
    bounded webhook POST), so it runs in the threadpool.
    """
    if not rule or not snapshot_handler:
        raise HTTPException(status_code=503, detail="Relay not initialized")

    # Read body
    body = await request.body()

    # Verify signature
    if not snapshot_handler.verify_signature(body, x_notifier_signature or ""):
        raise HTTPException(status_code=401, detail="Invalid signature")

    # Parse JSON
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Invalid JSON")

    ctx = snapshot_handler.parse_event(data)
    if ctx is None:
        raise HTTPException(status_code=400, detail="Malformed snapshot")

    payload = await run_in_threadpool(rule.on_change, ctx)

    return JSONResponse({
        "ok": True,
        "dispatched": payload is not None,
        "changes": payload.changed_fields if payload else [],
    })


# =============================================================================
# CLI Entry Point
# =============================================================================

def run_server():
    """Run the relay server"""
    import uvicorn

    cfg = load_config()
    port = cfg.relay.port

    logging.basicConfig(
        level=cfg.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    init_components(cfg)

    print(f"[Notifier] Starting server on port {port}")
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
