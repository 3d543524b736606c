"""Reader configuration for procsnap."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_PROC_ROOT = Path("/proc")
DEFAULT_MEMINFO_LINES = 5

PROC_ROOT_ENV = "PROCSNAP_PROC_ROOT"
MEMINFO_LINES_ENV = "PROCSNAP_MEMINFO_LINES"


@dataclass(slots=True)
class ReaderConfig:
    """Where the readers look and how much of meminfo they keep."""

    proc_root: Path = DEFAULT_PROC_ROOT
    memory_line_limit: int = DEFAULT_MEMINFO_LINES

    def __post_init__(self) -> None:
        self.proc_root = Path(self.proc_root)
        self.memory_line_limit = max(0, int(self.memory_line_limit))

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "ReaderConfig":
        """
        Build a config from PROCSNAP_* environment variables.

        Unset variables keep their defaults. A meminfo line count that is not
        an integer is ignored with a warning.
        """
        env = os.environ if environ is None else environ
        config = cls()

        proc_root = env.get(PROC_ROOT_ENV)
        if proc_root:
            config.proc_root = Path(proc_root)

        lines = env.get(MEMINFO_LINES_ENV)
        if lines:
            try:
                config.memory_line_limit = max(0, int(lines))
            except ValueError:
                logger.warning(
                    "Ignoring %s=%r: not an integer, keeping %d",
                    MEMINFO_LINES_ENV,
                    lines,
                    config.memory_line_limit,
                )

        return config
