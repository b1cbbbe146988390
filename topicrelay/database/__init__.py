from topicrelay.database.kvstore import Key, KeyValueStore, decode_key, encode_key

__all__ = ["Key", "KeyValueStore", "decode_key", "encode_key"]
