from .cafe import get_owned_cafe
from .plans import FeatureGate

__all__ = ["get_owned_cafe", "FeatureGate"]
