from maids.testing.stores import RecordingStore

__all__ = ["RecordingStore"]
