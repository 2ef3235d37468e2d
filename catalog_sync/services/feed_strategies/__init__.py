"""Normalization strategies for the supported supplier feeds."""

from typing import Dict, Type

from catalog_sync.exceptions import UnknownSupplierError

from .base_strategy import BaseFeedStrategy, FieldSpec
from .midocean_strategy import MidoceanFeedStrategy
from .xd_connects_strategy import XDConnectsFeedStrategy

STRATEGIES: Dict[str, Type[BaseFeedStrategy]] = {
    MidoceanFeedStrategy.source: MidoceanFeedStrategy,
    XDConnectsFeedStrategy.source: XDConnectsFeedStrategy,
}


def get_strategy(source: str, **kwargs) -> BaseFeedStrategy:
    """
    Instantiate the strategy registered for a supplier tag.

    Raises:
        UnknownSupplierError: If no strategy handles the tag
    """
    try:
        strategy_class = STRATEGIES[source]
    except KeyError:
        raise UnknownSupplierError(source) from None
    return strategy_class(**kwargs)


__all__ = [
    "BaseFeedStrategy",
    "FieldSpec",
    "MidoceanFeedStrategy",
    "XDConnectsFeedStrategy",
    "STRATEGIES",
    "get_strategy",
]
