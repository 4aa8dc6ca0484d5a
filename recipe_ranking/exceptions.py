"""Exception types raised by the recipe ranking engine."""


class RecipeRankingError(Exception):
    """Base class for ranking engine errors."""


class DataStoreError(RecipeRankingError):
    """A bundled data store could not read or write its backing data."""


class RankingCancelled(RecipeRankingError):
    """The caller aborted the request during the fetch phase."""
