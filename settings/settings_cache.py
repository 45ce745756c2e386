from threading import Lock
from cachetools import TTLCache
from settings.company_settings import CompanySetting

COMPANY_KEY = "company_info"


class CompanySettingsCache:
    """Read-through cache for the storefront settings row.

    The row is read once and served from memory until it expires or an
    update calls ``invalidate``. Values are plain dicts so they never hold
    on to a closed session.
    """

    def __init__(self, ttl=300, maxsize=1):
        self._cache = TTLCache(maxsize=maxsize, ttl=ttl)
        self._lock = Lock()

    def init_app(self, app):
        ttl = app.config.get("SETTINGS_CACHE_TTL", 300)
        self._cache = TTLCache(maxsize=1, ttl=ttl)
        app.extensions["company_settings_cache"] = self

    def get(self):
        with self._lock:
            if COMPANY_KEY in self._cache:
                return self._cache[COMPANY_KEY]

        settings = CompanySetting.query.first()
        data = settings.to_dict() if settings else None
        if data is not None:
            with self._lock:
                self._cache[COMPANY_KEY] = data
        return data

    def invalidate(self):
        with self._lock:
            self._cache.pop(COMPANY_KEY, None)


settings_cache = CompanySettingsCache()
