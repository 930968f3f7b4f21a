import sys
from pathlib import Path
from typing import Any, List

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from iex_intraday.config.settings import IEXSettings  # noqa: E402
from iex_intraday.errors import reset_error_metrics  # noqa: E402


class FakeResponse:
    def __init__(self, status: int = 200, body: bytes | str = b"", reason: str = "OK", delay: float = 0.0):
        self.status = status
        self.reason = reason
        self._body = body.encode() if isinstance(body, str) else body
        self._delay = delay

    async def read(self) -> bytes:
        return self._body

    async def text(self, encoding: str | None = None, errors: str = "strict") -> str:
        return self._body.decode(encoding or "utf-8", errors)

    async def __aenter__(self):
        if self._delay:
            import asyncio

            await asyncio.sleep(self._delay)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Stand-in for ``aiohttp.ClientSession`` replaying canned outcomes."""

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes: List[Any] = list(outcomes)
        self.calls: List[tuple[str, str]] = []
        self.closed = False

    def request(self, method: str, url: Any) -> FakeResponse:
        self.calls.append((method, str(url)))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("IEX_CLOUD_SECRET", "IEX_BASE_URL", "IEX_RATE_LIMIT_INTERVAL", "IEX_BATCH_SIZE"):
        monkeypatch.delenv(name, raising=False)
    reset_error_metrics()


@pytest.fixture
def settings() -> IEXSettings:
    return IEXSettings(base_url="https://iex.test/stable/", rate_limit_interval=0.0)
