import ast
from pathlib import Path

import pytest

import qos_amf

PACKAGE_DIR = Path(qos_amf.__file__).parent


def _relative_imports(path):
    tree = ast.parse(path.read_text())
    return {
        node.module.split('.')[0]
        for node in ast.walk(tree)
        if isinstance(node, ast.ImportFrom) and node.level == 2 and node.module
    }


@pytest.mark.parametrize("subpackage, forbidden", [
    ('data', {'models', 'utils'}),
    ('models', {'utils'}),
])
def test_lower_layers_do_not_import_higher_ones(subpackage, forbidden):
    for path in (PACKAGE_DIR / subpackage).glob('*.py'):
        assert not _relative_imports(path) & forbidden, path.name


def test_subpackages_load_in_declared_order():
    source = (PACKAGE_DIR / '__init__.py').read_text()
    positions = [source.index(f"from . import {name}") for name in ('data', 'models', 'utils')]
    assert positions == sorted(positions)
