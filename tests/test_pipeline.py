"""End-to-end tests for the diagram pipeline."""

from dataclasses import replace

from sclass_cli.config_manager import Settings
from sclass_cli.models import ContractExclusions, ExcludeConfig
from sclass_cli.pipeline import DiagramPipeline

BASE_CHILD_DIAGRAM = (
    "---\n"
    "title: Inline Class Diagram\n"
    "---\n"
    "classDiagram\n"
    "\n"
    "\tclass Base {\n"
    "\t\t❗🧮 baseFunc() returns (uint256)\n"
    "\t}\n"
    "\n"
    "\tclass Child {\n"
    "\t}\n"
    "\n"
    "\tBase <|-- Child\n"
)


def _settings(**contract_rules):
    return Settings(exclude=ExcludeConfig(contracts=ContractExclusions(**contract_rules)))


def test_base_child_diagram(base_child_source):
    """Test the smallest inheritance example renders exactly."""
    pipeline = DiagramPipeline(Settings())
    assert pipeline.run_source("Inline.sol", base_child_source) == BASE_CHILD_DIAGRAM


def test_output_is_deterministic(test_contract_path):
    pipeline = DiagramPipeline(Settings())
    assert pipeline.run(test_contract_path) == pipeline.run(test_contract_path)


def test_title_from_file_name(test_contract_path):
    text = DiagramPipeline(Settings()).run(test_contract_path)
    assert text.startswith("---\ntitle: TestContract Class Diagram\n---\nclassDiagram\n")


def test_classes_in_source_order(test_contract_path):
    result = DiagramPipeline(Settings()).collect(
        "TestContract.sol", test_contract_path.read_text()
    )
    assert [c.class_name for c in result.contracts] == [
        "Base",
        "MiddleInInheritance",
        "ContractInCollection",
        "TestContract1",
        "TestContract2",
        "ITestContract",
        "MathLib",
    ]
    assert result.edges == [
        "Base <|-- MiddleInInheritance",
        "MiddleInInheritance <|-- TestContract1",
        "ContractInCollection <|-- TestContract1",
        "MiddleInInheritance <|-- TestContract2",
    ]


def test_excluded_parent_drops_edge(test_contract_path):
    """Test edges never point at classes that were filtered out."""
    pipeline = DiagramPipeline(
        _settings(collections=("test",)),
        {"test": ["ContractInCollection"]},
    )
    result = pipeline.collect("TestContract.sol", test_contract_path.read_text())
    names = [c.class_name for c in result.contracts]
    assert "ContractInCollection" not in names
    assert result.excluded == ["ContractInCollection"]
    assert all("ContractInCollection" not in edge for edge in result.edges)
    assert "MiddleInInheritance <|-- TestContract1" in result.edges


def test_kind_exclusions(test_contract_path):
    pipeline = DiagramPipeline(_settings(interfaces=True, libraries=True))
    text = pipeline.run(test_contract_path)
    assert "class ITestContract" not in text
    assert "class MathLib" not in text
    assert "class TestContract1" in text


def test_exception_overrides_exclusion(test_contract_path):
    pipeline = DiagramPipeline(_settings(contracts=("Base",), exceptions=("Base",)))
    assert "\tclass Base {" in pipeline.run(test_contract_path)


def test_names_only_parameters(test_contract_path):
    settings = replace(Settings(), disable_function_param_type=True)
    text = DiagramPipeline(settings).run(test_contract_path)
    assert "setUint256PublicVar(_uint256PublicVar)" in text
    assert "uint256 _uint256PublicVar" not in text


def test_vault_rendering(vault_path):
    text = DiagramPipeline(Settings()).run(vault_path)
    assert "\t\t❗ IERC20 token\n" in text
    assert "\t\t🔒 mapping(Status => uint256[]) _byStatus\n" in text
    assert "\t\t❗💰 deposit(uint256 amount) returns (shares, ok)\n" in text
    assert "\t\t❗💰 receive()\n" in text
    assert "constructor" not in text
    assert text.endswith("\tOwnable <|-- Vault\n")


def test_duplicate_parent_is_one_edge(build_unit):
    source = "contract A {}\ncontract B is A, A {}\n"
    result = DiagramPipeline(Settings()).collect("Dup.sol", source)
    assert result.edges == ["A <|-- B"]


def test_duplicate_class_name_kept_once():
    source = "contract A {}\ncontract A { uint256 public x; }\n"
    result = DiagramPipeline(Settings()).collect("Dup.sol", source)
    assert [c.class_name for c in result.contracts] == ["A"]
    assert result.contracts[0].fields == []


def test_naming_warnings(vault_path):
    settings = replace(Settings(), check_naming=True)
    result = DiagramPipeline(settings).collect("Vault.sol", vault_path.read_text())
    assert result.warnings == []

    source = "contract N { uint256 counter; function bump() internal {} }"
    result = DiagramPipeline(settings).collect("N.sol", source)
    assert result.warnings == [
        "Internal variable with name not starting with '_': N.counter",
        "Internal function with name not starting with '_': N.bump",
    ]


def test_legacy_constant_glyph():
    source = "contract Old { function c() public constant returns (uint) {} }"
    text = DiagramPipeline(Settings()).run_source("Old.sol", source)
    assert "\t\t❗ℏ c() returns (uint)\n" in text
