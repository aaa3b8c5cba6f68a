"""Tests for the class instantiation helpers."""

import pytest

from crtkit.geo import sce
from crtkit.utils.factory import instantiate, module_dict


class TestFactory:
    """Name to class mapping and instantiation."""

    def test_module_dict(self):
        classes = module_dict(sce)
        assert classes["NoSpaceCharge"] is sce.NoSpaceCharge
        assert classes["none"] is sce.NoSpaceCharge
        assert classes["disabled"] is sce.NoSpaceCharge
        assert classes["grid"] is sce.GridSpaceCharge

    def test_instantiate(self):
        classes = module_dict(sce)
        assert isinstance(instantiate(classes, "none"), sce.NoSpaceCharge)
        assert isinstance(instantiate(classes, {"name": "none"}), sce.NoSpaceCharge)

    def test_alias(self):
        with pytest.warns(DeprecationWarning):
            instantiate(module_dict(sce), "disabled")

    def test_errors(self):
        classes = module_dict(sce)
        with pytest.raises(ValueError):
            instantiate(classes, "unknown")
        with pytest.raises(AssertionError):
            instantiate(classes, {"kwargs": {}})
        with pytest.raises(TypeError):
            instantiate(classes, {"name": "none", "foo": 1})
