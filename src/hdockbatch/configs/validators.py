"""Validation of batch configuration values."""

from typing import Any

ON_TOOL_ERROR_CHOICES = ("abort", "continue")
RESUME_MARKER_CHOICES = ("output", "sentinel")
REQUIRED_FIELDS = (
    "receptor",
    "site",
    "ligands_dir",
    "results_dir",
    "hdock_bin",
    "createpl_bin",
)
KNOWN_FIELDS = set(REQUIRED_FIELDS) | {
    "workdir",
    "ligand_extension",
    "n_models",
    "on_tool_error",
    "resume_marker",
    "write_summary",
}


class ConfigError(ValueError):
    """Raised when the batch configuration is invalid."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ConfigValidator:
    """Validation rules for the batch configuration dictionary."""

    @staticmethod
    def validate(data: dict[str, Any]) -> dict[str, Any]:
        """Validate config data and return validation result.

        Args:
            data: Configuration dictionary to validate

        Returns:
            Dictionary with 'valid' (bool), 'errors' (list) and 'warnings' (list)
        """
        result = {
            "valid": True,
            "errors": [],
            "warnings": [],
        }

        ConfigValidator._validate_paths(data, result)
        ConfigValidator._validate_models(data, result)
        ConfigValidator._validate_policies(data, result)

        for key in sorted(set(data) - KNOWN_FIELDS):
            result["warnings"].append(f"Unknown config key ignored: {key}")

        result["valid"] = len(result["errors"]) == 0
        return result

    @staticmethod
    def _validate_paths(data: dict[str, Any], result: dict[str, Any]) -> None:
        for field in REQUIRED_FIELDS:
            if field not in data or not data[field]:
                result["errors"].append(f"Missing required field: {field}")

        extension = data.get("ligand_extension", ".pdb")
        if not isinstance(extension, str) or not extension.startswith("."):
            result["errors"].append(
                "ligand_extension must be a string starting with '.' (e.g. '.pdb')"
            )

    @staticmethod
    def _validate_models(data: dict[str, Any], result: dict[str, Any]) -> None:
        n_models = data.get("n_models", 10)
        # bool is an int subclass
        if isinstance(n_models, bool) or not isinstance(n_models, int) or n_models < 1:
            result["errors"].append("n_models must be a positive integer")

    @staticmethod
    def _validate_policies(data: dict[str, Any], result: dict[str, Any]) -> None:
        on_tool_error = data.get("on_tool_error", "abort")
        if on_tool_error not in ON_TOOL_ERROR_CHOICES:
            result["errors"].append(
                f"on_tool_error must be one of: {', '.join(ON_TOOL_ERROR_CHOICES)}"
            )

        resume_marker = data.get("resume_marker", "output")
        if resume_marker not in RESUME_MARKER_CHOICES:
            result["errors"].append(
                f"resume_marker must be one of: {', '.join(RESUME_MARKER_CHOICES)}"
            )


def validate_config(data: dict[str, Any]) -> list[str]:
    """Raise ConfigError for invalid config; return any warnings."""
    result = ConfigValidator.validate(data)
    if not result["valid"]:
        raise ConfigError(result["errors"])
    return result["warnings"]
