import hashlib

from flask import Request

UNKNOWN = "unknown"
HASH_SEPARATOR = ":"


def visitor_hash(client_address: str | None, user_agent: str | None) -> str:
    """One-way visitor identifier: sha256 of ``address:agent`` as 64 hex chars."""
    address = (client_address or "").strip() or UNKNOWN
    agent = (user_agent or "").strip() or UNKNOWN
    payload = f"{address}{HASH_SEPARATOR}{agent}".encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def client_address(req: Request, trust_forwarded: bool = True) -> str:
    if trust_forwarded:
        connecting_ip = (req.headers.get("CF-Connecting-IP") or "").strip()
        if connecting_ip:
            return connecting_ip
        forwarded_for = req.headers.get("X-Forwarded-For") or req.headers.get("X-Real-IP")
        if forwarded_for:
            first = forwarded_for.split(",")[0].strip()
            if first:
                return first
    if req.remote_addr:
        return req.remote_addr
    return UNKNOWN


def client_user_agent(req: Request) -> str:
    return (req.headers.get("User-Agent") or "").strip() or UNKNOWN


def request_visitor_hash(req: Request, trust_forwarded: bool = True) -> str:
    return visitor_hash(client_address(req, trust_forwarded), client_user_agent(req))
