"""Test doubles for the client config source, registry store and auth handler."""
import asyncio

from fastapi.responses import JSONResponse

from auth_gateway.errors import StoreError
from auth_gateway.schemas import ClientDescriptor


def make_client(client_id: str = "c1", secret: str | None = "s1", redirects=None, **extra) -> ClientDescriptor:
    return ClientDescriptor(
        client_id=client_id,
        name=extra.pop("name", f"App {client_id}"),
        client_secret=secret,
        redirect_urls=redirects or ["https://a/cb"],
        **extra,
    )


class FakeSource:
    def __init__(self, clients=None, error: Exception | None = None):
        self.clients = list(clients) if clients is not None else [make_client()]
        self.error = error
        self.loads = 0

    def load(self):
        self.loads += 1
        if self.error is not None:
            raise self.error
        return list(self.clients)


class FakeStore:
    """Records upsert_all calls. Optionally blocks until release() and fails the first N calls."""

    def __init__(self, fail_times: int = 0, block: bool = False):
        self.calls: list[list[ClientDescriptor]] = []
        self.records: dict[str, ClientDescriptor] = {}
        self.fail_times = fail_times
        self.active = 0
        self.max_active = 0
        self._block = block
        self._release: asyncio.Event | None = None
        self._entered: asyncio.Event | None = None

    def _events(self) -> tuple[asyncio.Event, asyncio.Event]:
        # Created lazily so they bind to the running loop
        if self._release is None:
            self._release = asyncio.Event()
            self._entered = asyncio.Event()
        return self._release, self._entered

    async def wait_entered(self) -> None:
        _, entered = self._events()
        await entered.wait()

    def release(self) -> None:
        release, _ = self._events()
        release.set()

    async def upsert_all(self, descriptors):
        self.calls.append(list(descriptors))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self._block:
                release, entered = self._events()
                entered.set()
                await release.wait()
            if self.fail_times > 0:
                self.fail_times -= 1
                raise StoreError("Client registry unreachable: TimeoutError")
            for d in descriptors:
                self.records[d.client_id] = d
        finally:
            self.active -= 1


class FakeAuthHandler:
    def __init__(self, status_code: int = 200, body=None, headers=None):
        self.requests = []
        self.status_code = status_code
        self.body = body if body is not None else {"ok": True}
        self.headers = headers

    async def __call__(self, request):
        self.requests.append(request)
        return JSONResponse(self.body, status_code=self.status_code, headers=self.headers)
