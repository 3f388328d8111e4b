"""
Headline fetching and the recycled short-link ring behind /news.

The ring is a fixed set of aliases seeded at startup. Each /news call
reclaims aliases older than a day, then takes over the least recently used
ones for the new headlines.
"""
import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx
from sqlalchemy import delete, insert, select, update
from sqlalchemy.orm import Session, sessionmaker

from ..models.news import NewsAlias
from ..schemas.news import Headline, NewsSearchParams
from ..state import ToiState
from ..utils.error_handlers import NotFoundError, UpstreamConnectionError, UpstreamParseError

logger = logging.getLogger(__name__)

NEWS_RSS_URL = "https://news.google.com/rss"
ALIAS_TTL = timedelta(hours=24)
NAMES_PATH = Path(__file__).resolve().parent.parent / "resources" / "names.txt"


def load_alias_names(path: Path = NAMES_PATH) -> list[str]:
    names: list[str] = []
    seen: set[str] = set()
    for line in path.read_text(encoding="utf-8").splitlines():
        name = line.strip().lower()
        if name and name not in seen:
            seen.add(name)
            names.append(name)
    return names


def seed_aliases(session_factory: sessionmaker, names: list[str]) -> int:
    """Replace the alias ring with ``names``."""
    with session_factory() as db:
        with db.begin():
            db.execute(delete(NewsAlias))
            if names:
                db.execute(insert(NewsAlias), [{"alias": name} for name in names])
    logger.info("news alias ring seeded size=%s", len(names))
    return len(names)


def _reclaim_expired(db: Session, now: datetime) -> None:
    db.execute(
        update(NewsAlias)
        .where(NewsAlias.updated_at < now - ALIAS_TTL)
        .values(tinyurl=None, title=None, url=None, updated_at=None)
    )


def tinyurl_for(bind_addr: str, alias: str) -> str:
    return f"http://{bind_addr}/news/{alias}"


def allocate_aliases(
    session_factory: sessionmaker,
    bind_addr: str,
    items: list[tuple[str, str]],
) -> list[Headline]:
    """Point the least recently used aliases at ``items`` (title, url) in one transaction."""
    if not items:
        return []
    now = datetime.now(timezone.utc)
    with session_factory() as db:
        with db.begin():
            _reclaim_expired(db, now)
            aliases = list(
                db.scalars(
                    select(NewsAlias.alias)
                    .order_by(NewsAlias.updated_at.asc().nulls_first(), NewsAlias.alias.asc())
                    .limit(len(items))
                    .with_for_update(skip_locked=True)
                )
            )
            pairs = list(zip(aliases, items))
            db.execute(delete(NewsAlias).where(NewsAlias.alias.in_(aliases)))
            rows = [
                {
                    "alias": alias,
                    "tinyurl": tinyurl_for(bind_addr, alias),
                    "title": title,
                    "url": url,
                    "updated_at": now,
                }
                for alias, (title, url) in pairs
            ]
            if rows:
                db.execute(insert(NewsAlias), rows)
    if len(pairs) < len(items):
        logger.warning("news alias ring exhausted; returning %s of %s headlines", len(pairs), len(items))
    return [Headline(title=row["title"], tinyurl=row["tinyurl"]) for row in rows]


def resolve_alias(session_factory: sessionmaker, alias: str) -> str:
    now = datetime.now(timezone.utc)
    with session_factory() as db:
        with db.begin():
            _reclaim_expired(db, now)
            url = db.scalar(select(NewsAlias.url).where(NewsAlias.alias == alias.lower()))
    if not url:
        raise NotFoundError("news alias not found")
    return url


def news_feed_url(params: NewsSearchParams) -> tuple[str, dict[str, str]]:
    locale = {"hl": "en-US", "gl": "US", "ceid": "US:en"}
    terms = []
    if params.query:
        terms.append(params.query)
    if params.when:
        terms.append(f"when:{params.when}h")
    if not terms:
        return NEWS_RSS_URL, locale
    return f"{NEWS_RSS_URL}/search", {"q": " ".join(terms), **locale}


def parse_rss(text: str) -> list[tuple[str, str]]:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise UpstreamParseError(f"news feed is not valid XML: {e}") from e
    items = []
    for item in root.iter("item"):
        title = (item.findtext("title") or "").strip()
        link = (item.findtext("link") or "").strip()
        if title and link:
            items.append((title, link))
    return items


async def get_headlines(state: ToiState, params: NewsSearchParams) -> list[Headline]:
    url, query = news_feed_url(params)
    try:
        r = await state.web_client.get(url, params=query)
    except httpx.RequestError as e:
        raise UpstreamConnectionError(f"news feed request failed: {type(e).__name__}") from e
    if r.status_code >= 400:
        raise UpstreamConnectionError(f"news feed responded with HTTP {r.status_code}")
    items = parse_rss(r.text)[: params.limit]
    return allocate_aliases(state.session_factory, state.server.bind_addr, items)
