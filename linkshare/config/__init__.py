from linkshare.config.settings import settings

__all__ = ["settings"]
