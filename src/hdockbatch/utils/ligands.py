"""Discovery of ligand structure files."""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_LIGAND_EXTENSION = ".pdb"


@dataclass(frozen=True)
class Ligand:
    """A ligand file and the base name its results are filed under."""

    path: Path
    name: str


def ligand_name(path: Path, extension: str = DEFAULT_LIGAND_EXTENSION) -> str:
    """Return the file name of ``path`` without ``extension``."""
    file_name = Path(path).name
    if extension and file_name.endswith(extension):
        return file_name[: -len(extension)]
    return file_name


def discover_ligands(
    ligands_dir: Path, extension: str = DEFAULT_LIGAND_EXTENSION
) -> list[Ligand]:
    """List ligand files directly inside ``ligands_dir``.

    Only regular files whose name ends with ``extension`` are returned;
    subdirectories are not searched. The list is sorted by file name so that
    progress output is stable between runs.

    Parameters
    ----------
    ligands_dir : Path
        Directory holding the ligand structure files.
    extension : str
        Case-sensitive file name suffix, including the dot.

    Returns
    -------
    list[Ligand]
        Discovered ligands; empty if the directory holds no matching files.
    """
    ligands_dir = Path(ligands_dir)
    ligands = []
    for path in sorted(ligands_dir.iterdir(), key=lambda p: p.name):
        if not path.name.endswith(extension) or not path.is_file():
            continue
        name = ligand_name(path, extension)
        if not name:
            continue
        ligands.append(Ligand(path=path.resolve(), name=name))
    return ligands
