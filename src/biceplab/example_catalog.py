"""Example catalog module.

The tutorial's examples are described in ``catalog.yaml`` which ships with
the package. Each entry says where an example's template lives inside the
scaffolded examples directory, which parameter file to use per
environment, and how its deployments are named.

Catalog Entry Structure:
    name: Example directory name (e.g. 02-parameters-variables)
    title: Short human-readable title
    description: One or two sentences about what the example teaches
    template: Template file, relative to the example directory
    deployment_prefix: Prefix for generated deployment names
    parameter_files: Mapping of environment -> parameter file ("default" is the fallback)
"""

import logging
import re
from dataclasses import asdict, dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

try:
    import yaml
except ImportError:
    raise ImportError("PyYAML not available. Install with: pip install pyyaml")

logger = logging.getLogger(__name__)

CATALOG_RESOURCE = "catalog.yaml"


class CatalogError(Exception):
    """Raised when the example catalog is malformed or an example is unknown."""

    pass


@dataclass
class ExampleDefinition:
    """One deployable tutorial example."""

    name: str
    title: str
    template: str
    deployment_prefix: str
    description: str = ""
    parameter_files: dict[str, str] = field(default_factory=dict)

    NAME_PATTERN = re.compile(r"^(\d+)-[a-z0-9][a-z0-9-]*$")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExampleDefinition":
        """Create an example from a catalog entry.

        Raises:
            CatalogError: If required fields are missing
        """
        required_fields = ["name", "title", "template", "deployment_prefix"]
        missing_fields = [f for f in required_fields if f not in data]

        if missing_fields:
            raise CatalogError(f"Missing required field: {', '.join(missing_fields)}")

        example = cls(
            name=str(data["name"]),
            title=str(data["title"]),
            template=str(data["template"]),
            deployment_prefix=str(data["deployment_prefix"]),
            description=str(data.get("description", "")).strip(),
            parameter_files=dict(data.get("parameter_files") or {}),
        )
        example.validate()
        return example

    def validate(self) -> None:
        """Validate example fields.

        Raises:
            CatalogError: If validation fails
        """
        if not self.NAME_PATTERN.match(self.name):
            raise CatalogError(f"Invalid example name: {self.name!r}")

        if not self.template.endswith(".bicep"):
            raise CatalogError(f"Example {self.name} template must be a .bicep file")

        for path in [self.template, *self.parameter_files.values()]:
            if Path(path).is_absolute() or ".." in Path(path).parts:
                raise CatalogError(f"Example {self.name} references a path outside itself: {path}")

    @property
    def number(self) -> int:
        match = self.NAME_PATTERN.match(self.name)
        return int(match.group(1)) if match else 0

    def parameter_file_for(self, environment: str) -> str | None:
        """Parameter file for an environment, falling back to ``default``."""
        return self.parameter_files.get(environment) or self.parameter_files.get("default")

    def directory(self, examples_dir: Path) -> Path:
        return examples_dir / self.name

    def template_path(self, examples_dir: Path) -> Path:
        return self.directory(examples_dir) / self.template


class ExampleCatalog:
    """Lookup over the examples listed in catalog.yaml."""

    def __init__(self, examples: list[ExampleDefinition]):
        names = [e.name for e in examples]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise CatalogError(f"Duplicate example names: {', '.join(duplicates)}")
        self.examples = sorted(examples, key=lambda e: e.number)

    @classmethod
    def load(cls, path: Path | None = None) -> "ExampleCatalog":
        """Load the catalog from ``path`` or from the bundled catalog.yaml.

        Raises:
            CatalogError: If the file cannot be read or parsed
        """
        try:
            if path is None:
                text = resources.files("biceplab").joinpath(CATALOG_RESOURCE).read_text()
            else:
                text = Path(path).read_text()
            data = yaml.safe_load(text)
        except (OSError, yaml.YAMLError) as e:
            raise CatalogError(f"Failed to load example catalog: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("examples"), list):
            raise CatalogError("Example catalog must contain an 'examples' list")

        examples = [ExampleDefinition.from_dict(entry) for entry in data["examples"]]
        logger.debug(f"Loaded {len(examples)} examples from catalog")
        return cls(examples)

    def names(self) -> list[str]:
        return [e.name for e in self.examples]

    def get(self, name: str) -> ExampleDefinition:
        """Find an example by full name or by its number (``02`` or ``2``).

        Raises:
            CatalogError: If no example matches
        """
        for example in self.examples:
            if example.name == name:
                return example

        if name.isdigit():
            for example in self.examples:
                if example.number == int(name):
                    return example

        raise CatalogError(
            f"Unknown example: {name}. Available examples: {', '.join(self.names())}"
        )


__all__ = ["CatalogError", "ExampleCatalog", "ExampleDefinition"]
