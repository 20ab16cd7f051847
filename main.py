"""
main.py

Console demo: opens a session, loads one list screen and prints its rows with
the offered actions and urgency tiers.

Without --base-url the demo runs against the in-memory backend seeded with a
few acquisitions; with --base-url it logs in to the REST API.
"""

from __future__ import annotations

import argparse
import logging
from datetime import timedelta

from core.common.session_context import SessionContext
from core.config.config_service import ConfigService
from core.exceptions.errors import BackendError
from core.helpers.date_time_helper import utc_now
from core.models.actor import Actor
from core.models.entity import EntityType
from gateway.memory_gateway import InMemoryBackendGateway
from gateway.rest_gateway import RestBackendGateway
from listing.controllers.list_controller import ListController
from listing.logic.query_reducer import SearchEdited

logger = logging.getLogger("prodconsole")


def _demo_backend() -> InMemoryBackendGateway:
    actor = Actor.create(
        username="demo",
        role="Purchaser",
        capabilities=[
            "Acquisitions.ViewTab", "Acquisitions.View", "Acquisitions.Create",
            "Acquisitions.Edit", "Acquisitions.Receive", "Acquisitions.Cancel",
        ],
        user_id=1,
    )
    now = utc_now()
    backend = InMemoryBackendGateway(actor)
    backend.seed(EntityType.ACQUISITION, [
        {"title": "Steel coils", "status": 0, "type": 0, "dueDate": (now - timedelta(days=2)).isoformat(),
         "createdAt": (now - timedelta(days=9)).isoformat()},
        {"title": "PET flakes", "status": 0, "type": 1, "dueDate": (now + timedelta(days=3)).isoformat(),
         "createdAt": (now - timedelta(days=5)).isoformat()},
        {"title": "Copper wire", "status": "Received", "type": "RawMaterials",
         "createdAt": (now - timedelta(days=20)).isoformat()},
        {"title": "Aluminium scrap", "status": "ReadyForProcessing", "type": "RecyclableMaterials",
         "dueDate": (now + timedelta(days=30)).isoformat(), "createdAt": (now - timedelta(days=1)).isoformat()},
    ])
    return backend


def _print_screen(controller: ListController) -> None:
    if controller.error:
        print(f"Error: {controller.error}")
        return
    page = controller.page
    if page is None:
        print("(screen not available)")
        return

    stats = ", ".join(f"{k}={v}" for k, v in controller.statistics.values.items()) if controller.statistics else ""
    print(f"Statistics: {stats}")
    print(f"Toolbar: {controller.toolbar_actions()}")
    for row in controller.rows:
        e = row.entity
        actions = ", ".join(a.action if a.enabled else f"({a.action}: {a.hint})" for a in row.actions)
        tier = row.urgency.value if row.urgency else "-"
        title = e.data.get("title") or e.data.get("name") or e.id
        print(f"  #{e.id:<4} {title!s:<20} {e.status or '-':<20} {tier:<10} [{actions}]")
    first, last = page.item_range()
    print(f"Showing {first} to {last} of {page.total_count}  pages: {controller.page_numbers()}")
    if controller.notice:
        print(f"Notice: {controller.notice}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Production console demo")
    parser.add_argument("--base-url", help="REST API base URL (defaults to Backend.base_url)")
    parser.add_argument("--username")
    parser.add_argument("--password")
    parser.add_argument("--entity", default=EntityType.ACQUISITION.value,
                        choices=[t.value for t in EntityType])
    parser.add_argument("--search", help="Search term")
    args = parser.parse_args()

    config = ConfigService()
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    base_url = args.base_url or config.backend.base_url
    if base_url:
        backend = RestBackendGateway(base_url, timeout=config.backend.timeout_seconds)
        try:
            actor = backend.login(args.username or "", args.password or "")
        except BackendError as ex:
            logger.error("Login failed: %s", ex.message)
            raise SystemExit(1) from ex
    else:
        backend = _demo_backend()
        actor = backend.current_actor()

    session = SessionContext(backend=backend, config=config)
    session.start(actor)

    controller = session.list_controller(args.entity)
    if args.search:
        controller.dispatch(SearchEdited(args.search))
    else:
        controller.reload()
    _print_screen(controller)

    if not base_url and controller.rows:
        target = next((r for r in controller.rows if "receive" in r.enabled_actions), None)
        if target is not None:
            print(f"\nReceiving #{target.entity.id} ...")
            controller.perform(target.entity, "receive")
            _print_screen(controller)
        print("\nAudit trail:")
        for entry in session.audit.fetch_logs(limit=10):
            print(f"  {entry.as_dict()}")

    session.end()


if __name__ == "__main__":
    main()
