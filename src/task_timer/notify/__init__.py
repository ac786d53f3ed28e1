from .notifier import LogNotifier, PlyerNotifier

__all__ = ["LogNotifier", "PlyerNotifier"]
