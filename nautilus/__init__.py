__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'nautilus'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .commands import *
from .configuration import *
from .evaluate import *
from .faults import *
from .flags import *
from .intrinsics import *
from .scopes import *
from .sessions import *
from .shell import *
from .suggestions import *
from .utils import Unset
from .validation import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info",
    "Unset",
)

# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the configuration store
__all__ += configuration.__all__  # type: ignore[attr-defined]
# Load the exposed API of the eval sub-shell
__all__ += evaluate.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the flags
__all__ += flags.__all__  # type: ignore[attr-defined]
# Load the exposed API of the built-in commands
__all__ += intrinsics.__all__  # type: ignore[attr-defined]
# Load the exposed API of the scopes
__all__ += scopes.__all__  # type: ignore[attr-defined]
# Load the exposed API of the sessions
__all__ += sessions.__all__  # type: ignore[attr-defined]
# Load the exposed API of the shell
__all__ += shell.__all__  # type: ignore[attr-defined]
# Load the exposed API of the suggestion engine
__all__ += suggestions.__all__  # type: ignore[attr-defined]
# Load the exposed API of the validators
__all__ += validation.__all__  # type: ignore[attr-defined]
