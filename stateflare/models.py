from datetime import datetime

from stateflare import db


class SiteStats(db.Model):
    __tablename__ = "site_stats"

    site_origin = db.Column(db.String(2048), primary_key=True)
    uv = db.Column(db.Integer, nullable=False, default=0)
    pv = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<SiteStats {self.site_origin} uv={self.uv} pv={self.pv}>"


class Visitor(db.Model):
    __tablename__ = "visitors"

    id = db.Column(db.Integer, primary_key=True)
    site_origin = db.Column(db.String(2048), nullable=False)
    visitor_hash = db.Column(db.String(64), nullable=False)
    first_visit = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    last_visit = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    visit_count = db.Column(db.Integer, nullable=False, default=1)

    # The unique constraint also serves as the (site_origin, visitor_hash) lookup index.
    __table_args__ = (
        db.UniqueConstraint("site_origin", "visitor_hash", name="uq_visitors_site_origin_visitor_hash"),
    )
