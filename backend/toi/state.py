import logging
from dataclasses import dataclass

import httpx
from fastapi import Request
from sqlalchemy.orm import sessionmaker

from .config import HTTP_TIMEOUT_S, ServerConfig, ToiConfig
from .database import create_db_engine, create_session_factory
from .services.model_client import ModelClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToiState:
    """Everything a handler needs, built once at startup and never mutated."""

    session_factory: sessionmaker
    model_client: ModelClient
    server: ServerConfig
    web_client: httpx.AsyncClient
    loopback_client: httpx.AsyncClient
    openapi_spec: str = ""


def build_state(config: ToiConfig, *, database_url: str | None = None) -> ToiState:
    engine = create_db_engine(database_url)
    model_client = ModelClient(
        embedding=config.embedding,
        generation=config.generation,
        reranking=config.reranking,
    )
    web_client = httpx.AsyncClient(
        headers={"User-Agent": config.server.user_agent},
        timeout=HTTP_TIMEOUT_S,
        follow_redirects=True,
    )
    loopback_client = httpx.AsyncClient(
        base_url=f"http://127.0.0.1:{config.server.port}",
        timeout=HTTP_TIMEOUT_S,
    )
    logger.info("state ready bind_addr=%s db=%s", config.server.bind_addr, engine.dialect.name)
    return ToiState(
        session_factory=create_session_factory(engine),
        model_client=model_client,
        server=config.server,
        web_client=web_client,
        loopback_client=loopback_client,
    )


async def close_state(state: ToiState) -> None:
    await state.model_client.aclose()
    await state.web_client.aclose()
    await state.loopback_client.aclose()
    bind = state.session_factory.kw.get("bind")
    if bind is not None:
        bind.dispose()


def get_state(request: Request) -> ToiState:
    return request.app.state.toi
