"""Utility functions for hdockbatch package."""

from hdockbatch.utils.ligands import Ligand, discover_ligands
from hdockbatch.utils.workspace import Workspace

__all__ = ["Ligand", "Workspace", "discover_ligands"]
