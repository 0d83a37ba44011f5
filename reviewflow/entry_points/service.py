import dataclasses
import logging
import re
import urllib.parse

from reviewflow.store import models
from reviewflow.store import service as store_service

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def canonicalize_src(src: str) -> str:
    return _WHITESPACE.sub("_", src.strip())


def build_customer_link(base_url: str, slug: str, src: str) -> str:
    return f"{base_url.rstrip('/')}/{slug}?src={urllib.parse.quote(src, safe='')}"


class EntryPointRegistry:
    """Named, trackable sources stored on the business config."""

    def __init__(self, store: store_service.StoreService):
        self.store = store

    async def get_entry_points(self) -> list[models.EntryPoint]:
        snapshot = await self.store.load()
        return list(snapshot.config.entry_points)

    async def upsert(
        self, label: str, src: str, entry_point_id: str | None = None
    ) -> tuple[models.EntryPoint, models.WriteResult]:
        """Replace the entry point with the same id in place, or prepend a new one."""
        label = label.strip()
        src = src.strip()
        if not label or not src:
            logger.warning(
                "Rejected entry point with missing fields",
                extra={"entry_point_id": entry_point_id},
            )
            msg = "Please provide both a label and a source value."
            raise models.ValidationError(msg)

        entry_point = models.EntryPoint(label=label, src=canonicalize_src(src))
        if entry_point_id:
            entry_point = dataclasses.replace(entry_point, id=entry_point_id)

        def apply(config: models.BusinessConfig) -> models.BusinessConfig:
            existing = config.entry_points
            if any(ep.id == entry_point.id for ep in existing):
                entry_points = [
                    entry_point if ep.id == entry_point.id else ep for ep in existing
                ]
            else:
                entry_points = [entry_point, *existing]
            return dataclasses.replace(config, entry_points=entry_points)

        _, result = await self.store.modify_config("upsert_entry_point", apply)
        logger.info(
            "Entry point saved",
            extra={"entry_point_id": entry_point.id, "src": entry_point.src},
        )
        return entry_point, result

    async def delete(self, entry_point_id: str) -> models.WriteResult:
        """Remove an entry point by id; unknown ids leave the list unchanged."""

        def apply(config: models.BusinessConfig) -> models.BusinessConfig:
            return dataclasses.replace(
                config,
                entry_points=[
                    ep for ep in config.entry_points if ep.id != entry_point_id
                ],
            )

        _, result = await self.store.modify_config("delete_entry_point", apply)
        logger.info("Entry point deleted", extra={"entry_point_id": entry_point_id})
        return result

    async def links(self, base_url: str) -> list[tuple[models.EntryPoint, str]]:
        snapshot = await self.store.load()
        slug = snapshot.config.slug
        return [
            (ep, build_customer_link(base_url, slug, ep.src))
            for ep in snapshot.config.entry_points
        ]
