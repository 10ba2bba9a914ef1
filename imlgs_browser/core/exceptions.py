class ImlgsBrowserError(Exception):
    """Base exception for all imlgs_browser errors"""
    pass

class ConfigError(ImlgsBrowserError):
    """Invalid or inconsistent global.json / dataset config"""
    pass

class DatasetConnectionError(ImlgsBrowserError, ConnectionError):
    """
    The parquet source could not be opened as a view
    (missing file, unreadable parquet, extension failed to load),
    or a query was issued before initialize().
    """
    pass

class QueryError(ImlgsBrowserError):
    """
    A generated query was rejected by the engine, or a WhereClause
    does not line up with its parameters
    """
    pass

class NotFoundError(ImlgsBrowserError, LookupError):
    """A single-row lookup matched zero rows"""
    pass
