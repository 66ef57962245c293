from __future__ import annotations
import logging
from typing import Dict, List, Optional

import requests

from .config import ConteConfig


log = logging.getLogger(__name__)


def clients_query(page: int = 1, length: int = 1000, date_from: str = "2023-01-01", date_to: str = "2025-12-31") -> Dict:
    return {
        "page": page,
        "length": length,
        "filters": {"dateFrom": date_from, "dateTo": date_to, "status": None},
        "sort": {"field": "createdAt", "order": "desc"},
    }


def extract_emails(data: Dict) -> List[str]:
    items = ((data or {}).get("result") or {}).get("items") or []
    return [c.get("email") for c in items if isinstance((c or {}).get("email"), str) and "@" in c["email"]]


def emails_csv(emails: List[str]) -> str:
    return "\n".join(["email", *emails])


def fetch_client_emails(cfg: ConteConfig, session: Optional[requests.Session] = None, **query) -> List[str]:
    s = session if session is not None else requests.Session()
    resp = s.post(
        cfg.clients_url,
        json=clients_query(**query),
        headers={"Authorization": f"Bearer {cfg.api_key}", "Content-Type": "application/json"},
        timeout=cfg.timeout,
    )
    resp.raise_for_status()
    emails = extract_emails(resp.json())
    log.info("Fetched %d client emails", len(emails))
    return emails
