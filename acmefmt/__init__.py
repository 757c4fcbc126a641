"""
acmefmt — reformat files saved in acme without reloading the window.

Library usage::

    from acmefmt import Reformatter, FormatterRegistry
    from acmefmt.acme import AcmeLog, open_window

    reformatter = Reformatter(registry, open_document=open_window(mount))
    reformatter.run(AcmeLog(mount))
"""

from .formatters import FormatterRegistry
from .reformat import Reformatter

__all__ = ["FormatterRegistry", "Reformatter"]
