from chat_relay.memory.chat_log import ChatLog
from chat_relay.memory.pruning import prune_history
from chat_relay.memory.store import MemoryStore

__all__ = [
    "ChatLog",
    "MemoryStore",
    "prune_history",
]
