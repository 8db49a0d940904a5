"""UV/PV counters.

Two counting strategies share the ``record_visit(site_origin, visitor_hash)``
contract and are selected with the ``STATS_MODE`` setting:

``unique``
    Keeps one ``visitors`` row per (site, visitor hash). UV grows only when a
    visitor hash is seen for the first time on that site.
``pageviews``
    Keeps only the ``site_stats`` row. UV is set to 1 when the row is created
    and never grows afterwards.

Every write is a single atomic statement (insert-on-conflict or an
``UPDATE ... SET n = n + 1``), so concurrent workers never lose increments.
"""

from dataclasses import dataclass
from datetime import datetime

from flask import current_app
from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from stateflare import db
from stateflare.models import SiteStats, Visitor

STATS_MODE_UNIQUE = "unique"
STATS_MODE_PAGEVIEWS = "pageviews"
STATS_MODES = (STATS_MODE_UNIQUE, STATS_MODE_PAGEVIEWS)

UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class StatsConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class SiteCounts:
    uv: int = 0
    pv: int = 0

    def as_dict(self) -> dict[str, int]:
        return {"uv": self.uv, "pv": self.pv}


def validate_stats_mode(mode: str | None) -> str:
    normalized = (mode or "").strip().lower()
    if normalized not in STATS_MODES:
        raise StatsConfigError(
            f"STATS_MODE must be one of {', '.join(STATS_MODES)} (got {mode!r})."
        )
    return normalized


def _upsert_insert():
    return UPSERT_INSERTS.get(db.engine.dialect.name)


def _claim_visitor(site_origin: str, visitor_hash: str, now: datetime) -> bool:
    """Create the visitor row or bump its visit count. True when it was created."""
    visitors = Visitor.__table__
    values = {
        "site_origin": site_origin,
        "visitor_hash": visitor_hash,
        "first_visit": now,
        "last_visit": now,
        "visit_count": 1,
    }

    insert = _upsert_insert()
    if insert is not None:
        stmt = (
            insert(visitors)
            .values(**values)
            .on_conflict_do_nothing(index_elements=["site_origin", "visitor_hash"])
            .returning(visitors.c.id)
        )
        created = db.session.execute(stmt).scalar() is not None
    else:
        try:
            with db.session.begin_nested():
                db.session.execute(visitors.insert().values(**values))
            created = True
        except IntegrityError:
            current_app.logger.debug("Visitor row for %s already exists, updating instead", site_origin)
            created = False

    if not created:
        db.session.execute(
            update(visitors)
            .where(visitors.c.site_origin == site_origin, visitors.c.visitor_hash == visitor_hash)
            .values(visit_count=visitors.c.visit_count + 1, last_visit=now)
        )
    return created


def _bump_site(site_origin: str, uv_increment: int, now: datetime) -> SiteCounts:
    """Add one page view (and ``uv_increment`` visitors) and return the new totals."""
    site_stats = SiteStats.__table__

    insert = _upsert_insert()
    if insert is not None:
        stmt = insert(site_stats).values(
            site_origin=site_origin,
            uv=1,
            pv=1,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["site_origin"],
            set_={
                "uv": site_stats.c.uv + uv_increment,
                "pv": site_stats.c.pv + 1,
                "updated_at": now,
            },
        ).returning(site_stats.c.uv, site_stats.c.pv)
        row = db.session.execute(stmt).one()
        return SiteCounts(uv=row.uv, pv=row.pv)

    try:
        with db.session.begin_nested():
            db.session.execute(
                site_stats.insert().values(
                    site_origin=site_origin,
                    uv=1,
                    pv=1,
                    created_at=now,
                    updated_at=now,
                )
            )
        return SiteCounts(uv=1, pv=1)
    except IntegrityError:
        pass

    db.session.execute(
        update(site_stats)
        .where(site_stats.c.site_origin == site_origin)
        .values(
            uv=site_stats.c.uv + uv_increment,
            pv=site_stats.c.pv + 1,
            updated_at=now,
        )
    )
    row = db.session.execute(
        select(site_stats.c.uv, site_stats.c.pv).where(site_stats.c.site_origin == site_origin)
    ).one()
    return SiteCounts(uv=row.uv, pv=row.pv)


def record_unique_visit(site_origin: str, visitor_hash: str) -> SiteCounts:
    now = datetime.utcnow()
    try:
        is_new_visitor = _claim_visitor(site_origin, visitor_hash, now)
        counts = _bump_site(site_origin, 1 if is_new_visitor else 0, now)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return counts


def record_page_view(site_origin: str, visitor_hash: str | None = None) -> SiteCounts:
    """Page-view-only counting. ``visitor_hash`` is accepted and ignored."""
    now = datetime.utcnow()
    try:
        counts = _bump_site(site_origin, 0, now)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
    return counts


def update_stats(site_origin: str) -> SiteCounts:
    return record_page_view(site_origin)


RECORDERS = {
    STATS_MODE_UNIQUE: record_unique_visit,
    STATS_MODE_PAGEVIEWS: record_page_view,
}


def record_visit(site_origin: str, visitor_hash: str, mode: str | None = None) -> SiteCounts:
    """Count one visit with the configured strategy and return the updated totals."""
    if mode is None:
        mode = current_app.config.get("STATS_MODE", STATS_MODE_UNIQUE)
    recorder = RECORDERS[validate_stats_mode(mode)]
    return recorder(site_origin, visitor_hash)


def get_stats(site_origin: str) -> SiteCounts:
    stats = SiteStats.query.filter_by(site_origin=site_origin).first()
    if stats is None:
        return SiteCounts()
    return SiteCounts(uv=stats.uv, pv=stats.pv)


def list_sites(limit: int | None = None) -> list[SiteStats]:
    query = SiteStats.query.order_by(SiteStats.pv.desc(), SiteStats.site_origin.asc())
    if limit is not None:
        if limit < 1:
            raise ValueError("limit must be a positive integer.")
        query = query.limit(limit)
    return query.all()
