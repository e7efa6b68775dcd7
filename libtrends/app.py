import os
import json
import mimetypes
import re
import urllib.parse
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional

import redis

from libtrends.config import (
    HOST, PORT, UI_DIR, ALLOWED_ORIGIN, CHART_COLORS, STREAM_GRAPH_TAGS, TOP_TAGS_COUNT,
    REDIS_HOST, REDIS_PORT, REDIS_DB, RATE_LIMIT_PER_MINUTE,
)
from libtrends.errors import LibraryFetchError
from libtrends.providers.base import LibraryProvider
from libtrends.providers.zotero import ZoteroProvider
from libtrends.services import aggregator
from libtrends.services.library import LibrarySession
from libtrends.utils.logging_setup import configure_logging_from_env
from libtrends.utils.rate_limit import RateLimiter

logger = configure_logging_from_env(__name__)

MAX_TOP_N = 100
YEAR_ROUTE = re.compile(r"^/api/years/([^/]+)/(tags|items)$")


class BadRequest(Exception):
    pass


def clamp(n, lo, hi): return max(lo, min(hi, n))


def _int_param(qs: dict, name: str, default: int) -> int:
    raw = (qs.get(name, [""])[0]).strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise BadRequest(f"invalid_{name}")


def _parse_year(raw: str) -> int:
    if not re.match(r"^\d{1,4}$", raw):
        raise BadRequest("invalid_year")
    return int(raw)


class DashboardServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address, session: LibrarySession, limiter: Optional[RateLimiter] = None,
                 ui_dir: str = UI_DIR):
        super().__init__(address, Handler)
        self.session = session
        self.limiter = limiter
        self.ui_dir = ui_dir


class Handler(BaseHTTPRequestHandler):
    server: DashboardServer

    def log_message(self, fmt, *args):
        pass  # suppress default stdout access logs

    def _allow_origin(self) -> str:
        origin = self.headers.get("Origin", "")
        return origin if re.match(r"^http://localhost:\d+$", origin) else ALLOWED_ORIGIN

    def _send_json(self, status: int, payload: dict):
        try:
            body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
            self.send_response(status)
            self.send_header("Content-Type", "application/json; charset=utf-8")
            self.send_header("Access-Control-Allow-Origin", self._allow_origin())
            self.send_header("Access-Control-Allow-Headers", "Content-Type")
            self.send_header("Access-Control-Allow-Methods", "GET, OPTIONS")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)
        except Exception as e:
            logger.error("http_send_fail status=%d err=%s", status, e, exc_info=True)

    def do_OPTIONS(self):
        try:
            self.send_response(204)
            self.send_header("Access-Control-Allow-Origin", self._allow_origin())
            self.send_header("Access-Control-Allow-Headers", "Content-Type")
            self.send_header("Access-Control-Allow-Methods", "GET, OPTIONS")
            self.end_headers()
        except Exception as e:
            logger.error("http_options_fail err=%s", e, exc_info=True)

    def _rate_limited(self) -> bool:
        limiter = self.server.limiter
        if limiter is None:
            return False
        try:
            return not limiter.allow(self.client_address[0])
        except redis.RedisError as e:
            # limiter backend down: serve the request rather than fail it
            logger.error("rate_limit_backend_fail err=%s", e, exc_info=True)
            return False

    def do_GET(self):
        parsed = urllib.parse.urlparse(self.path)
        path = parsed.path.rstrip("/") or "/"

        try:
            if path == "/health":
                return self._send_json(200, {"status": "ok"})

            if path.startswith("/api/"):
                if self._rate_limited():
                    return self._send_json(429, {"error": "rate_limit_exceeded"})
                qs = urllib.parse.parse_qs(parsed.query or "")
                return self._handle_api(path, qs)

            return self._serve_static(parsed.path)
        except BadRequest as e:
            return self._send_json(400, {"error": str(e)})
        except LibraryFetchError as e:
            logger.error("library_unavailable path=%s err=%s", path, e)
            return self._send_json(502, {"error": "library_unavailable", "message": str(e)})
        except Exception as e:
            logger.error("request_unhandled_error path=%s err=%s", path, e, exc_info=True)
            return self._send_json(500, {"error": "internal_error"})

    def _handle_api(self, path: str, qs: dict):
        if path == "/api/config":
            return self._send_json(200, {
                "colors": CHART_COLORS,
                "stream_graph_tags": STREAM_GRAPH_TAGS,
                "top_tags_count": TOP_TAGS_COUNT,
            })

        m = YEAR_ROUTE.match(path)
        if path not in ("/api/stats", "/api/timeline", "/api/stream", "/api/years") and not m:
            return self._send_json(404, {"error": "not_found"})

        items = self.server.session.snapshot().items

        if path == "/api/stats":
            return self._send_json(200, aggregator.library_stats(items).to_dict())

        if path == "/api/timeline":
            series = aggregator.timeline_series(items)
            return self._send_json(200, {"series": [[y, c] for y, c in series]})

        if path == "/api/stream":
            top = clamp(_int_param(qs, "top", STREAM_GRAPH_TAGS), 0, MAX_TOP_N)
            return self._send_json(200, aggregator.stream_matrix(items, top).to_dict())

        if path == "/api/years":
            return self._send_json(200, {"years": aggregator.all_years(items)})

        year = _parse_year(m.group(1))
        if m.group(2) == "tags":
            top = clamp(_int_param(qs, "top", TOP_TAGS_COUNT), 0, MAX_TOP_N)
            ranked = aggregator.top_tags_for_year(items, year, top)
            return self._send_json(200, {"year": year, "tags": [[t, c] for t, c in ranked]})

        tag = qs.get("tag", [""])[0]
        if tag:
            matched = aggregator.items_for_year_and_tag(items, year, tag)
        else:
            matched = aggregator.items_for_year(items, year)
        return self._send_json(200, {
            "year": year,
            "tag": tag or None,
            "count": len(matched),
            "items": [it.to_dict() for it in matched],
        })

    def _serve_static(self, path: str):
        ui_dir = self.server.ui_dir
        try:
            if not os.path.isdir(ui_dir):
                return self._send_json(404, {"error": "ui_not_found"})
            root = os.path.realpath(ui_dir)
            if path in ("/", ""):
                file_path = os.path.join(root, "index.html")
            else:
                file_path = os.path.realpath(os.path.join(root, path.lstrip("/")))
                if not file_path.startswith(root + os.sep) or not os.path.isfile(file_path):
                    file_path = os.path.join(root, "index.html")
            if not os.path.exists(file_path):
                return self._send_json(404, {"error": "not_found"})
            ctype, _ = mimetypes.guess_type(file_path)
            with open(file_path, "rb") as f:
                data = f.read()
            self.send_response(200)
            self.send_header("Content-Type", ctype or "application/octet-stream")
            self.send_header("Content-Length", str(len(data)))
            self.end_headers()
            self.wfile.write(data)
        except Exception as e:
            logger.error("static_serve_fail path=%s err=%s", path, e, exc_info=True)
            return self._send_json(500, {"error": "static_serve_error"})


def create_server(host: str = HOST, port: int = PORT, provider: Optional[LibraryProvider] = None,
                  limiter: Optional[RateLimiter] = None, ui_dir: str = UI_DIR) -> DashboardServer:
    session = LibrarySession(provider or ZoteroProvider())
    return DashboardServer((host, port), session, limiter=limiter, ui_dir=ui_dir)


def default_limiter() -> RateLimiter:
    client = redis.StrictRedis(host=REDIS_HOST, port=REDIS_PORT, db=REDIS_DB, decode_responses=True)
    return RateLimiter(client, "api", rate=RATE_LIMIT_PER_MINUTE, per_seconds=60)


def main():
    httpd = None
    try:
        httpd = create_server(HOST, PORT, limiter=default_limiter())
        logger.info("server_start host=%s port=%d", HOST, PORT)
        httpd.serve_forever()
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.critical("server_crash err=%s", e, exc_info=True)
        raise
    finally:
        if httpd is not None:
            httpd.server_close()


if __name__ == "__main__":
    main()
