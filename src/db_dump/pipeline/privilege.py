"""Run a stage's command block as another OS user."""

import logging

from db_dump.errors import ConfigurationError
from db_dump.pipeline.models import HEREDOC_MARKER, Command, Stage
from db_dump.utilities import Utilities

logger = logging.getLogger(__name__)


def wrap_with_sudo(stage: Stage, sudo_user: str | None, utilities: Utilities) -> Stage:
    """Wrap the whole AND-chain of ``stage`` in one ``sudo -s`` shell.

    The block is fed to sudo through a quoted here-document, so every
    command of the chain runs inside the same privilege context.

    Args:
        stage: Stage to wrap
        sudo_user: Target user; ``None`` or empty returns ``stage`` unchanged
        utilities: Used to locate ``sudo``

    Returns:
        A single-command stage running ``stage`` as ``sudo_user``

    Raises:
        ConfigurationError: If the block contains the here-document
            terminator line
    """
    if not sudo_user:
        return stage

    # The shell ends the here-document at the first matching line
    if HEREDOC_MARKER in stage.render().splitlines():
        raise ConfigurationError(
            f"Stage '{stage.label}' contains a line '{HEREDOC_MARKER}' "
            f"and cannot be run as {sudo_user}"
        )

    logger.debug("Running %s as %s", stage.label, sudo_user)
    sudo = Command(
        utilities.resolve("sudo"),
        ("-s", "-u", sudo_user, "--"),
        heredoc=stage,
    )
    return Stage(label=f"{stage.label} (as {sudo_user})", commands=(sudo,))
