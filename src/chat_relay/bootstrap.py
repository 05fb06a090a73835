from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from chat_relay.app_config import AppConfig
from chat_relay.memory import ChatLog, MemoryStore, prune_history
from chat_relay.models import Credentials
from chat_relay.provider import ModelProvider, create_provider
from chat_relay.services.chat_service import ChatService
from chat_relay.services.history_projector import HistoryProjector
from chat_relay.services.session_invoker import SessionInvoker
from chat_relay.services.turn_recorder import TurnRecorder
from chat_relay.system_prompt import get_system_prompt


@dataclass
class AppRuntime:
    config: AppConfig
    credentials: Credentials
    memory_store: MemoryStore
    chat_log: ChatLog
    chat_service: ChatService
    invoker: SessionInvoker

    def close(self) -> None:
        self.memory_store.close()


def bootstrap_runtime(
    app: AppConfig,
    credentials: Credentials,
    *,
    provider: ModelProvider | None = None,
) -> AppRuntime:
    db_path = Path(app.memory_db_path)
    if not db_path.is_absolute():
        db_path = Path.cwd() / db_path
    memory_store = MemoryStore(str(db_path))
    prune_history(
        memory_store,
        max_turns_per_user=app.max_turns_per_user,
        retention_days=app.history_retention_days,
    )
    chat_log = ChatLog(memory_store)

    if provider is None and credentials.is_configured:
        provider = create_provider(app.provider_name, credentials.api_key, timeout=app.request_timeout)
    if not credentials.is_configured:
        logger.warning(f"{credentials.env_var} is not set; replies will use demo mode")

    invoker = SessionInvoker(
        credentials=credentials,
        projector=HistoryProjector(chat_log),
        model=app.model,
        system_prompt=get_system_prompt(),
        provider=provider,
    )
    chat_service = ChatService(recorder=TurnRecorder(chat_log), invoker=invoker)

    return AppRuntime(
        config=app,
        credentials=credentials,
        memory_store=memory_store,
        chat_log=chat_log,
        chat_service=chat_service,
        invoker=invoker,
    )
