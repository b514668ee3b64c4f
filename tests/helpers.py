"""Test helpers: a local tag registry, a recording process runner and fake entries."""

import asyncio
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace
from typing import Optional, Sequence

from aiohttp import web
from aiohttp.test_utils import TestServer


def ts(year: int, month: int = 1, day: int = 1) -> datetime:
    """Build an aware UTC datetime."""
    return datetime(year, month, day, tzinfo=timezone.utc)


def iso(value: datetime) -> str:
    """Format a datetime the way Docker Hub does."""
    return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def tag_record(name: str, last_updated: datetime) -> dict:
    """Build a single tag record of the listing API."""
    return {"name": name, "last_updated": iso(last_updated), "full_size": 1024}


def touch_artifact(path: Path, mtime: datetime) -> Path:
    """Create an artifact file with the given modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    stamp = mtime.timestamp()
    os.utime(path, (stamp, stamp))
    return path


class FakeRegistry:
    """A local server implementing the paginated repository tags endpoint."""

    def __init__(self, page_size: int = 2):
        self.page_size = page_size
        self.tags: dict[tuple[str, str], list[dict]] = {}
        self.broken: dict[tuple[str, str], str] = {}
        self.requests: list[str] = []
        self.server: Optional[TestServer] = None

    def add_tags(self, repository: str, image: str, records: list[dict]) -> None:
        self.tags[(repository, image)] = list(records)

    def break_image(self, repository: str, image: str, mode: str) -> None:
        """Make an image fail with mode "status", "json", "schema", "slow" or "loop"."""
        self.broken[(repository, image)] = mode

    @property
    def url(self) -> str:
        return str(self.server.make_url("/")).rstrip("/")

    async def handle_tags(self, request: web.Request) -> web.Response:
        key = (request.match_info["repository"], request.match_info["image"])
        self.requests.append(str(request.rel_url))

        mode = self.broken.get(key)
        if mode == "status":
            return web.json_response({"message": "boom"}, status=500)
        if mode == "json":
            return web.Response(text="<html>not json</html>", content_type="text/html")
        if mode == "schema":
            return web.json_response({"count": 1, "results": [{"name": "x"}]})
        if mode == "slow":
            await asyncio.sleep(1)
            return web.json_response({"count": 0, "next": None, "results": []})
        if mode == "loop":
            return web.json_response(
                {"count": 0, "next": str(request.url), "previous": None, "results": []}
            )
        if key not in self.tags:
            return web.json_response({"message": "object not found"}, status=404)

        records = self.tags[key]
        page = int(request.query.get("page", "1"))
        start = (page - 1) * self.page_size
        chunk = records[start : start + self.page_size]
        has_more = start + self.page_size < len(records)

        body = {
            "count": len(records),
            "next": str(request.url.with_query(page=page + 1)) if has_more else None,
            "previous": str(request.url.with_query(page=page - 1)) if page > 1 else None,
            "results": chunk,
        }
        return web.json_response(body)

    async def __aenter__(self) -> "FakeRegistry":
        app = web.Application()
        app.router.add_get(
            "/v2/repositories/{repository}/{image}/tags", self.handle_tags
        )
        self.server = TestServer(app)
        await self.server.start_server()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.server.close()


class StaticServer:
    """A local server returning fixed text bodies by path, 404 otherwise."""

    def __init__(self, documents: dict[str, str], delay: float = 0.0):
        self.documents = documents
        self.delay = delay
        self.server: Optional[TestServer] = None

    def url_for(self, path: str) -> str:
        return str(self.server.make_url(path))

    async def handle(self, request: web.Request) -> web.Response:
        if self.delay:
            await asyncio.sleep(self.delay)
        if request.path in self.documents:
            return web.Response(text=self.documents[request.path])
        return web.Response(status=404)

    async def __aenter__(self) -> "StaticServer":
        app = web.Application()
        app.router.add_get("/{path:.*}", self.handle)
        self.server = TestServer(app)
        await self.server.start_server()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.server.close()


@dataclass
class RecordingRunner:
    """Process runner that records invocations instead of starting processes.

    When ``create_artifacts`` is set, a successful ``build`` invocation creates
    its artifact file, like the real container builder does.
    """

    returncodes: list[int] = field(default_factory=list)
    create_artifacts: bool = False
    calls: list[tuple[list[str], Optional[bytes]]] = field(default_factory=list)

    async def __call__(self, args: Sequence[str], stdin: Optional[bytes] = None) -> int:
        self.calls.append((list(args), stdin))
        returncode = self.returncodes.pop(0) if self.returncodes else 0
        if returncode == 0 and self.create_artifacts and "build" in args:
            Path(args[-2]).write_bytes(b"sif")
        return returncode


@dataclass
class FakeEntry:
    """In-memory directory entry."""

    name: str
    mtime: float = 0.0
    regular_file: bool = True
    stat_error: Optional[Exception] = None

    def is_file(self) -> bool:
        return self.regular_file

    def stat(self):
        if self.stat_error is not None:
            raise self.stat_error
        return SimpleNamespace(st_mtime=self.mtime)
