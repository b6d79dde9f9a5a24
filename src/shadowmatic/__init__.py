import importlib.metadata
import logging

__version__ = importlib.metadata.version("shadowmatic")


logger = logging.Logger("shadowmatic")
logger.setLevel(logging.INFO)

from .failures import (
    AttributesNotShadowed,
    ConfigurationError,
    ReadOnlyShadowAttribute,
)
from .naming import DEFAULT_INSTANCE, prefix_with, suffix_with
from .registry import GlobalShadowRegistry, ShadowEntry, ShadowKey, ShadowRegistry
from .shadow_attribute import UNSET, DataclassHost, ShadowAttribute, ShadowHost
from .shadowable import Shadowable, SupportsShadowableAttributes
from .shadowing import (
    ShadowOptions,
    delegate_shadowed,
    shadow_attrs,
    shadowed_attrs,
    shadows,
    xtract_attrs,
)
