from .posix import TzStr
from .tzif import TzRules

__all__ = ["TzRules", "TzStr"]
