"""Resolution of workspace paths from the batch configuration.

All inputs and outputs live relative to a single workspace root, which
defaults to the directory the command was launched from.
"""

from dataclasses import dataclass
from pathlib import Path

HDOCK_OUTPUT_SUFFIX = "_hdock.out"
HDOCK_LOG_SUFFIX = "_hdock.log"
COMPLETION_SENTINEL = ".hdock_complete"


def _resolve_path(path, base_dir: Path) -> Path:
    """Resolve ``path`` against ``base_dir`` unless it is already absolute."""
    path = Path(path).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


@dataclass(frozen=True)
class Workspace:
    """Input and output locations of one batch."""

    root: Path
    receptor: Path
    site: Path
    ligands_dir: Path
    results_dir: Path

    @classmethod
    def from_config(cls, config: dict, cwd: Path | None = None) -> "Workspace":
        base = Path.cwd() if cwd is None else Path(cwd)
        workdir = config.get("workdir")
        root = _resolve_path(workdir, base) if workdir else base.resolve()
        return cls(
            root=root,
            receptor=_resolve_path(config["receptor"], root),
            site=_resolve_path(config["site"], root),
            ligands_dir=_resolve_path(config["ligands_dir"], root),
            results_dir=_resolve_path(config["results_dir"], root),
        )

    def ligand_result_dir(self, ligand_name: str) -> Path:
        return self.results_dir / ligand_name

    def hdock_output(self, ligand_name: str) -> Path:
        """Relocated docking output, also the default 'already done' marker."""
        return self.ligand_result_dir(ligand_name) / f"{ligand_name}{HDOCK_OUTPUT_SUFFIX}"

    def hdock_log(self, ligand_name: str) -> Path:
        return self.ligand_result_dir(ligand_name) / f"{ligand_name}{HDOCK_LOG_SUFFIX}"

    def completion_sentinel(self, ligand_name: str) -> Path:
        return self.ligand_result_dir(ligand_name) / COMPLETION_SENTINEL
