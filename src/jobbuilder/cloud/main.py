# cloud/main.py
from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request, Response
from starlette.concurrency import run_in_threadpool

from ..assembler import Clock, assemble
from ..decode import decode_request
from ..errors import DecodeError, RegistrationError
from ..logs import request_logger
from ..scheduler import SchedulerGateway
from ..settings import Settings

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


def remote_addr(request: Request) -> str:
    """Caller address: first X-Forwarded-For entry, else the peer host."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "-"


def _is_json(request: Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";")[0].strip().lower() == JSON_CONTENT_TYPE


def create_app(
    settings: Settings,
    scheduler: SchedulerGateway,
    clock: Optional[Clock] = None,
) -> FastAPI:
    now = clock or time.time
    app = FastAPI(title="CI Job Builder")

    # -------------------- Middleware --------------------

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        logger.info(
            "%s %s %s",
            remote_addr(request), request.method, request.url,
            extra={"remote_ip": remote_addr(request)},
        )
        return await call_next(request)

    # -------------------- Endpoints --------------------

    @app.post("/build-job", status_code=204)
    async def build_job(request: Request) -> Response:
        log = request_logger(logger, remote_addr(request))

        if not _is_json(request):
            log.error("unsupported content type: %r", request.headers.get("content-type"))
            return Response(status_code=415)

        body = await request.body()

        try:
            decoded = decode_request(body)
        except DecodeError as e:
            log.error("unable to decode build request: %s", e)
            return Response(status_code=400)

        job = assemble(decoded.spec, decoded.source_archive, now, settings.datacenters)
        log.debug("assembled job %s", job.to_dict())

        try:
            eval_id = await run_in_threadpool(scheduler.register, job)
        except RegistrationError as e:
            log.error("unable to submit job %s: %s", job.id, e)
            return Response(status_code=500)

        log.info("submitted job %s with eval id %s", job.id, eval_id)
        return Response(status_code=204)

    return app
