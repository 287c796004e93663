from .kv_store import KeyValueRepository
