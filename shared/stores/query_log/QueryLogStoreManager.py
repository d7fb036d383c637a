from shared.helper.HelperConfig import HelperConfig
from shared.stores.query_log.QueryLogStoreInterface import QueryLogStoreInterface

# URL scheme → engine package under shared.stores.query_log
_SCHEME_ENGINES: dict[str, str] = {
    "postgres": "Postgres",
    "postgresql": "Postgres",
    "sqlite": "Sqlite",
}


class QueryLogStoreManager:
    """Manager class to instantiate the query log store selected by DATABASE_URL."""

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.store = self._initialize_store()

    def _get_engine_from_url(self, database_url: str) -> str:
        """Map the DATABASE_URL scheme onto an engine name.

        Returns:
            str: Capitalised engine name (e.g. "Postgres"), "Disabled" when no URL is set.

        Raises:
            ValueError: If the scheme is not supported.
        """
        if not database_url:
            return "Disabled"
        scheme = database_url.split("://", 1)[0].lower()
        engine = _SCHEME_ENGINES.get(scheme)
        if engine is None:
            raise ValueError(f"Unsupported DATABASE_URL scheme '{scheme}'. Supported: {', '.join(sorted(_SCHEME_ENGINES))}.")
        return engine

    def _initialize_store(self) -> QueryLogStoreInterface:
        """Instantiate the store for the configured engine.

        Returns:
            QueryLogStoreInterface: The instantiated store.

        Raises:
            ValueError: If the engine is unsupported or cannot be imported.
        """
        database_url = self.helper_config.get_string_val("DATABASE_URL", default="")
        engine = self._get_engine_from_url(database_url)
        class_name = f"QueryLogStore{engine}"
        try:
            module = __import__(
                f"shared.stores.query_log.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            store_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported query log engine '{engine}'. Error: {e}")
        if engine == "Disabled":
            self.logging.warning("DATABASE_URL is not set; query logging is disabled.")
        else:
            self.logging.debug("Instantiated query log store for engine: %s", engine)
        return store_class(helper_config=self.helper_config, database_url=database_url)

    def get_store(self) -> QueryLogStoreInterface:
        """Return the instantiated store."""
        return self.store
