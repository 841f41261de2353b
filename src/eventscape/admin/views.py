"""SQLAdmin model and tool views."""

import asyncio
import logging

from sqladmin import BaseView, ModelView, action, expose
from sqlalchemy import func, select
from starlette.requests import Request
from starlette.responses import HTMLResponse, RedirectResponse

from eventscape.database import AsyncSessionLocal
from eventscape.exceptions import InvalidTransitionError
from eventscape.models.category import Category
from eventscape.models.event import Event, EventStatus
from eventscape.models.listing import ListingStatus, ScrapedListing
from eventscape.tasks.expire_events import run_expire_events
from eventscape.tasks.process_queue import run_process_queue

logger = logging.getLogger(__name__)


async def transition_listings(pks: list[int], target: ListingStatus) -> tuple[int, int]:
    """Move the given listings to ``target``; returns (moved, skipped)."""
    moved = skipped = 0
    async with AsyncSessionLocal() as db:
        for pk in pks:
            listing = await db.get(ScrapedListing, pk)
            if listing is None:
                skipped += 1
                continue
            try:
                listing.transition_to(target)
            except InvalidTransitionError as e:
                logger.warning(f"Admin action skipped listing {pk}: {e}")
                skipped += 1
                continue
            listing.queued_for_processing = target == ListingStatus.APPROVED
            moved += 1
        await db.commit()
    return moved, skipped


def _selected_pks(request: Request) -> list[int]:
    return [int(pk) for pk in request.query_params.get("pks", "").split(",") if pk]


class ListingAdmin(ModelView, model=ScrapedListing):
    name_plural = "Listings"
    column_list = [
        ScrapedListing.id,
        ScrapedListing.title,
        ScrapedListing.url,
        ScrapedListing.status,
        ScrapedListing.queued_for_processing,
        ScrapedListing.last_error,
        ScrapedListing.created_at,
    ]
    column_searchable_list = [ScrapedListing.title, ScrapedListing.url]
    column_sortable_list = [ScrapedListing.created_at, ScrapedListing.status]
    column_default_sort = [(ScrapedListing.created_at, True)]
    can_create = False

    @action(name="approve", label="Approve", add_in_detail=True, add_in_list=True)
    async def approve(self, request: Request) -> RedirectResponse:
        moved, skipped = await transition_listings(_selected_pks(request), ListingStatus.APPROVED)
        logger.info(f"Admin approved {moved} listings ({skipped} skipped)")
        return RedirectResponse(request.url_for("admin:list", identity=self.identity))

    @action(name="reject", label="Reject", add_in_detail=True, add_in_list=True)
    async def reject(self, request: Request) -> RedirectResponse:
        moved, skipped = await transition_listings(_selected_pks(request), ListingStatus.REJECTED)
        logger.info(f"Admin rejected {moved} listings ({skipped} skipped)")
        return RedirectResponse(request.url_for("admin:list", identity=self.identity))


class EventAdmin(ModelView, model=Event):
    column_list = [
        Event.id,
        Event.name,
        Event.date_text,
        Event.time_text,
        Event.location,
        Event.store_type,
        Event.status,
        Event.category_ids,
    ]
    column_searchable_list = [Event.name, Event.location]
    column_sortable_list = [Event.name, Event.status, Event.updated_at]
    can_create = False

    @action(name="publish", label="Publish", add_in_detail=True, add_in_list=True)
    async def publish(self, request: Request) -> RedirectResponse:
        pks = _selected_pks(request)
        async with AsyncSessionLocal() as db:
            result = await db.execute(
                select(Event).where(
                    Event.id.in_(pks), Event.status == EventStatus.PENDING.value
                )
            )
            for event in result.scalars().all():
                event.status = EventStatus.APPROVED.value
            await db.commit()
        return RedirectResponse(request.url_for("admin:list", identity=self.identity))


class CategoryAdmin(ModelView, model=Category):
    column_list = [Category.id, Category.name]
    column_sortable_list = [Category.id, Category.name]
    can_create = False
    can_delete = False


_TOOLS_TEMPLATE = """\
{% extends "sqladmin/layout.html" %}
{% block content %}
<div class="container-fluid p-4">
  <h2>Ingestion Tools</h2>
  <form method="post" class="mt-3 d-flex align-items-center gap-2 flex-wrap">
    <button name="action" value="process_queue" class="btn btn-primary">Process Queue</button>
    <button name="action" value="expire" class="btn btn-secondary">Expire Past Events</button>
  </form>
  {% if message %}
  <div class="alert alert-success mt-3">{{ message }}</div>
  {% endif %}

  <hr class="my-4">

  <h2>Listings by Status</h2>
  <table class="table table-sm table-bordered mt-2" style="max-width:360px">
    <thead><tr><th>Status</th><th class="text-end">Listings</th></tr></thead>
    <tbody>
    {% for status, count in listing_counts %}
      <tr class="{{ 'table-danger' if status == 'error' and count else '' }}">
        <td>{{ status }}</td>
        <td class="text-end">{{ count }}</td>
      </tr>
    {% endfor %}
    </tbody>
  </table>
</div>
{% endblock %}
"""


async def count_listings_by_status() -> list[tuple[str, int]]:
    async with AsyncSessionLocal() as db:
        result = await db.execute(
            select(ScrapedListing.status, func.count()).group_by(ScrapedListing.status)
        )
        counts = dict(result.all())
    return [(status.value, counts.get(status.value, 0)) for status in ListingStatus]


class IngestionToolsView(BaseView):
    name = "Tools"
    icon = "fa-wrench"

    @expose("/tools", methods=["GET", "POST"])
    async def tools(self, request: Request) -> HTMLResponse:
        message: str | None = None

        if request.method == "POST":
            form = await request.form()
            action_name = form.get("action")
            if action_name == "process_queue":
                asyncio.create_task(run_process_queue())
                message = "Queue processing started in background."
            elif action_name == "expire":
                count = await run_expire_events()
                message = f"Expired {count} events."

        tmpl = self.templates.env.from_string(_TOOLS_TEMPLATE)
        content = await tmpl.render_async(
            request=request,
            message=message,
            listing_counts=await count_listings_by_status(),
        )
        return HTMLResponse(content)
