from __future__ import annotations

import asyncio
import os
import shutil
import sys

import uvicorn

from .domain.entities import PayRequest, ZkPayRequest
from .envs.escrow_env import Settings, get_settings


def _use_uvloop() -> None:
    if sys.platform == "win32":
        return
    try:
        import uvloop
    except ImportError:
        return  # default event loop
    asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())


def _reset_metrics_dir() -> None:
    """Start from an empty PROMETHEUS_MULTIPROC_DIR so stale counters vanish."""
    prom_dir = os.environ.get("PROMETHEUS_MULTIPROC_DIR")
    if not prom_dir:
        return
    shutil.rmtree(prom_dir, ignore_errors=True)
    os.makedirs(prom_dir, exist_ok=True)


def _print_banner(settings: Settings) -> None:
    params = settings.ledger_params
    base = f"http://{settings.api_host}:{settings.api_port}"
    print(f"{settings.app_name} v{settings.app_version} escrow")
    print(f"  program id:       {settings.program_id}")
    print(f"  ledger store:     {settings.database_url}")
    print(f"  transaction fee:  {params.transaction_fee}")
    print(f"  plain deposit:    {params.storage_deposit(PayRequest.SPACE)}")
    print(f"  private deposit:  {params.storage_deposit(ZkPayRequest.SPACE)}")
    print(f"  api:              {base}/api/v1  (docs at {base}/docs)")


def main() -> None:
    settings = get_settings()
    _use_uvloop()
    _print_banner(settings)
    _reset_metrics_dir()

    uvicorn.run(
        "veilpay.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
        log_level="info",
    )


if __name__ == "__main__":
    main()
