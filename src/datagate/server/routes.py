"""
REST resource routes.

Table and id come from the path; query-string filters, ordering and
pagination are parsed into the query model and handed to the data service.
"""

from typing import Any

from aiohttp import web

from datagate.core.exceptions import ValidationError
from datagate.core.models import QueryOptions
from datagate.core.query import parse_filters, parse_order_by, parse_select
from datagate.core.validation import parse_non_negative_int
from datagate.server.middleware import error_response
from datagate.services.data import DataService

SERVICE_KEY = web.AppKey("service", DataService)

routes = web.RouteTableDef()


def _service(request: web.Request) -> DataService:
    return request.app[SERVICE_KEY]


async def _json_body(request: web.Request) -> Any:
    try:
        return await request.json()
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise ValidationError("body", "<request body>", "Request body must be valid JSON") from e


@routes.get("/health")
async def health(request: web.Request) -> web.Response:
    status = await _service(request).health_check()
    return web.json_response(status.to_dict(), status=200 if status.ok else 503)


@routes.get("/{table}/count")
async def count(request: web.Request) -> web.Response:
    filters = parse_filters(request.query.getall("filter", []))
    total = await _service(request).count(request.match_info["table"], filters or None)
    return web.json_response({"count": total})


@routes.get("/{table}")
async def find_many(request: web.Request) -> web.Response:
    query = request.query
    options = QueryOptions(
        filters=parse_filters(query.getall("filter", [])),
        order_by=parse_order_by(query.getall("orderBy", [])),
        limit=parse_non_negative_int("limit", query.get("limit")),
        offset=parse_non_negative_int("offset", query.get("offset")),
        select=parse_select(query.get("select")),
    )
    result = await _service(request).find_many(request.match_info["table"], options)
    return web.json_response(result.to_dict())


@routes.get("/{table}/{id}")
async def find_one(request: web.Request) -> web.Response:
    record = await _service(request).find_one(
        request.match_info["table"], request.match_info["id"]
    )
    if record is None:
        return error_response("Not found", 404)
    return web.json_response(record)


@routes.post("/{table}/batch")
async def create_many(request: web.Request) -> web.Response:
    body = await _json_body(request)
    if not isinstance(body, list):
        return error_response("Body must be an array", 400)
    if not all(isinstance(item, dict) for item in body):
        return error_response("Every item must be an object", 400)

    records = await _service(request).create_many(request.match_info["table"], body)
    return web.json_response(records, status=201)


@routes.post("/{table}")
async def create(request: web.Request) -> web.Response:
    body = await _json_body(request)
    if not isinstance(body, dict):
        return error_response("Body must be an object", 400)

    record = await _service(request).create(request.match_info["table"], body)
    return web.json_response(record, status=201)


@routes.put("/{table}/{id}")
async def update(request: web.Request) -> web.Response:
    body = await _json_body(request)
    if not isinstance(body, dict):
        return error_response("Body must be an object", 400)

    record = await _service(request).update(
        request.match_info["table"], request.match_info["id"], body
    )
    return web.json_response(record)


@routes.delete("/{table}/{id}")
async def delete(request: web.Request) -> web.Response:
    await _service(request).delete(request.match_info["table"], request.match_info["id"])
    return web.json_response({"ok": True})


def resource_app(service: DataService) -> web.Application:
    """Build the sub-application serving the resource routes."""
    app = web.Application()
    app[SERVICE_KEY] = service
    app.add_routes(routes)
    return app
