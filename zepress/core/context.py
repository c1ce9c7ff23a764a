"""Per-render context and out-of-band render jobs.

Diagrams and math cannot be produced synchronously, so the Markdown stage
emits a placeholder element with a stable id and records a pending job. A
host later runs the jobs with its own rasterizer and calls
:func:`apply_completed_renders` to swap the placeholders. A document that
still contains placeholders is a valid result of the synchronous pass.
"""

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional

import structlog

from ..utils.html import parse_html, serialize_html
from .config import Settings
from .exceptions import RenderError

if TYPE_CHECKING:
    from ..assets.catalogue import AssetCatalogue
    from ..highlight.highlighter import Highlighter
    from ..highlight.themes import ThemeResolver

logger = structlog.get_logger(__name__)

RENDER_FAILED_CLASS = "zp-render-failed"


@dataclass(frozen=True)
class PendingRender:
    """A placeholder awaiting an asynchronous render."""

    id: str
    kind: str
    source: str
    options: Mapping[str, Any] = field(default_factory=dict)


Rasterizer = Callable[[PendingRender], Awaitable[str]]


class RenderQueue:
    """Collects pending jobs for one render; ids are sequential per kind."""

    def __init__(self):
        self._jobs: list[PendingRender] = []
        self._counters: dict[str, int] = {}

    def enqueue(self, kind: str, source: str, **options: Any) -> PendingRender:
        index = self._counters.get(kind, 0)
        self._counters[kind] = index + 1
        job = PendingRender(id=f"{kind}-{index}", kind=kind, source=source, options=dict(options))
        self._jobs.append(job)
        return job

    @property
    def jobs(self) -> tuple[PendingRender, ...]:
        return tuple(self._jobs)

    def __len__(self) -> int:
        return len(self._jobs)


@dataclass
class RenderContext:
    """Dependencies available to structural plugins during one render."""

    settings: Settings
    catalogue: "AssetCatalogue"
    highlighter: "Highlighter"
    themes: "ThemeResolver"
    queue: RenderQueue = field(default_factory=RenderQueue)


def failure_markup(job: PendingRender) -> str:
    return f'<span class="{RENDER_FAILED_CLASS}">{job.kind} render failed</span>'


async def complete_renders(jobs: tuple[PendingRender, ...], rasterizer: Rasterizer) -> dict[str, str]:
    """Run every pending job concurrently.

    Args:
        jobs: Pending jobs from a render
        rasterizer: Host coroutine returning replacement markup for a job

    Returns:
        Mapping of placeholder id to replacement markup; failed jobs map to
        a failure element
    """
    results = await asyncio.gather(*(rasterizer(job) for job in jobs), return_exceptions=True)
    completed: dict[str, str] = {}
    for job, result in zip(jobs, results):
        if isinstance(result, BaseException):
            error = RenderError(f"Failed to render {job.kind}", cause=result if isinstance(result, Exception) else None)
            logger.warning("Out-of-band render failed", id=job.id, error=str(error))
            completed[job.id] = failure_markup(job)
        else:
            completed[job.id] = result
    return completed


def apply_completed_renders(html: str, completed: Mapping[str, str]) -> str:
    """Replace placeholder contents with completed render output.

    Placeholders without a completed entry are left as they are.

    Args:
        html: Document containing placeholders
        completed: Mapping of placeholder id to replacement markup

    Returns:
        Updated document
    """
    if not completed:
        return html
    soup = parse_html(html)
    applied = 0
    for placeholder_id, markup in completed.items():
        element = soup.find(id=placeholder_id)
        if element is None:
            continue
        element.clear()
        element.append(parse_html(markup))
        element["data-render-state"] = "done"
        applied += 1
    logger.debug("Applied completed renders", applied=applied, requested=len(completed))
    return serialize_html(soup)


@dataclass(frozen=True)
class RenderResult:
    """Output of the Markdown stage."""

    html: str
    pending: tuple[PendingRender, ...] = ()

    async def complete(self, rasterizer: Rasterizer) -> dict[str, str]:
        return await complete_renders(self.pending, rasterizer)

    def apply(self, completed: Mapping[str, str], html: Optional[str] = None) -> str:
        return apply_completed_renders(self.html if html is None else html, completed)
