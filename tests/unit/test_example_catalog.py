"""Unit tests for the example catalog."""

from pathlib import Path

import pytest

from biceplab.example_catalog import CatalogError, ExampleCatalog, ExampleDefinition


def _entry(**overrides):
    data = {
        "name": "02-parameters-variables",
        "title": "Parameters and variables",
        "template": "storage-with-params.bicep",
        "deployment_prefix": "params",
        "parameter_files": {"default": "storage.parameters.json", "prod": "storage.prod.parameters.json"},
    }
    data.update(overrides)
    return data


class TestExampleDefinition:
    """Test entry parsing and validation."""

    def test_from_dict(self):
        example = ExampleDefinition.from_dict(_entry())

        assert example.number == 2
        assert example.parameter_file_for("prod") == "storage.prod.parameters.json"
        assert example.parameter_file_for("dev") == "storage.parameters.json"

    def test_missing_required_field(self):
        data = _entry()
        del data["template"]

        with pytest.raises(CatalogError, match="template"):
            ExampleDefinition.from_dict(data)

    def test_no_parameter_files(self):
        example = ExampleDefinition.from_dict(_entry(parameter_files=None))

        assert example.parameter_file_for("prod") is None

    @pytest.mark.parametrize("name", ["parameters", "2-Params", "02_params", ""])
    def test_invalid_name(self, name):
        with pytest.raises(CatalogError, match="Invalid example name"):
            ExampleDefinition.from_dict(_entry(name=name))

    def test_template_must_be_bicep(self):
        with pytest.raises(CatalogError, match=".bicep"):
            ExampleDefinition.from_dict(_entry(template="azuredeploy.json"))

    @pytest.mark.parametrize("path", ["../other/main.bicep", "/etc/main.bicep"])
    def test_rejects_paths_outside_example(self, path):
        with pytest.raises(CatalogError, match="outside"):
            ExampleDefinition.from_dict(_entry(template=path))

    def test_paths(self):
        example = ExampleDefinition.from_dict(_entry())

        assert example.template_path(Path("examples")) == Path(
            "examples/02-parameters-variables/storage-with-params.bicep"
        )


class TestExampleCatalog:
    """Test loading and lookup."""

    def test_bundled_catalog_loads(self):
        catalog = ExampleCatalog.load()

        assert catalog.names() == [
            "01-basic-storage",
            "02-parameters-variables",
            "03-modules",
            "04-conditionals-loops",
            "05-outputs",
        ]

    def test_bundled_templates_exist_in_corpus(self, scaffolded_workspace):
        catalog = ExampleCatalog.load()

        for example in catalog.examples:
            assert example.template_path(scaffolded_workspace / "examples").is_file()
            for file_name in example.parameter_files.values():
                assert (example.directory(scaffolded_workspace / "examples") / file_name).is_file()

    @pytest.mark.parametrize("name", ["03-modules", "03", "3"])
    def test_get_by_name_or_number(self, name):
        assert ExampleCatalog.load().get(name).name == "03-modules"

    def test_get_unknown(self):
        with pytest.raises(CatalogError, match="Available examples"):
            ExampleCatalog.load().get("99")

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(
            "examples:\n"
            "  - name: 10-custom\n"
            "    title: Custom\n"
            "    template: main.bicep\n"
            "    deployment_prefix: custom\n"
        )

        catalog = ExampleCatalog.load(path)

        assert catalog.get("10").title == "Custom"

    def test_load_rejects_malformed_yaml(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("examples: [unclosed\n")

        with pytest.raises(CatalogError, match="Failed to load"):
            ExampleCatalog.load(path)

    def test_load_requires_examples_list(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("examples: 3\n")

        with pytest.raises(CatalogError, match="'examples' list"):
            ExampleCatalog.load(path)

    def test_duplicate_names_rejected(self):
        example = ExampleDefinition.from_dict(_entry())

        with pytest.raises(CatalogError, match="Duplicate"):
            ExampleCatalog([example, example])
