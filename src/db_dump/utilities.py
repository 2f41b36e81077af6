"""Lookup of the external command line utilities a dump relies on.

Paths come from the ``[utilities]`` table of the config file when given,
otherwise from ``PATH``.
"""

import shutil
from collections.abc import Mapping

from db_dump.errors import UtilityNotFoundError


class Utilities:
    """Resolves utility names (``mysqldump``, ``tar``, ...) to executable paths."""

    def __init__(self, paths: Mapping[str, str] | None = None) -> None:
        self._paths = dict(paths or {})

    def resolve(self, name: str) -> str:
        """Return the path to ``name``.

        Raises:
            UtilityNotFoundError: If no explicit path is configured and the
                utility is not on ``PATH``.
        """
        if name in self._paths:
            return self._paths[name]

        found = shutil.which(name)
        if found is None:
            raise UtilityNotFoundError(
                f"Could not locate '{name}'.\n"
                f"Make sure it is installed or set its path under [utilities]."
            )
        return found
