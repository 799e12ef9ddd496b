"""
Unit tests for the get_impl method in claimy.util.

This test suite covers:
- Falling back to the default type when the environment variable is unset or empty
- Importing an override from a fully qualified name
- Type validation of both the override and the default
"""

import os
import unittest
from abc import ABC, abstractmethod

from claimy.gateway.gateway import Gateway
from claimy.mem.memory_gateway import MemoryGateway
from claimy.util import get_impl, import_from


class BaseTestClass:
    """Base class for testing inheritance"""

    pass


class ValidSubclass(BaseTestClass):
    """Valid subclass for testing"""

    pass


class InvalidClass:
    """Class that doesn't inherit from BaseTestClass"""

    pass


class AbstractTestClass(ABC):
    """Abstract base class for testing"""

    @abstractmethod
    def test_method(self):
        pass


class ConcreteTestClass(AbstractTestClass):
    """Concrete implementation of abstract class"""

    def test_method(self):
        return "implemented"


class TestGetImpl(unittest.TestCase):
    """Test cases for the get_impl method"""

    def setUp(self):
        """Set up test environment"""
        self.original_env = {}
        self.test_env_var = "TEST_GET_IMPL_VAR"
        if self.test_env_var in os.environ:
            self.original_env[self.test_env_var] = os.environ[self.test_env_var]
            del os.environ[self.test_env_var]

    def tearDown(self):
        """Clean up test environment"""
        if self.test_env_var in os.environ:
            del os.environ[self.test_env_var]
        for key, value in self.original_env.items():
            os.environ[key] = value

    def test_get_impl_fallback_to_default(self):
        result = get_impl(self.test_env_var, BaseTestClass, ValidSubclass)
        self.assertEqual(result, ValidSubclass)

    def test_get_impl_empty_env_var_uses_default(self):
        os.environ[self.test_env_var] = ""
        result = get_impl(self.test_env_var, BaseTestClass, ValidSubclass)
        self.assertEqual(result, ValidSubclass)

    def test_get_impl_with_valid_env_var(self):
        os.environ[self.test_env_var] = f"{__name__}.ValidSubclass"
        result = get_impl(self.test_env_var, BaseTestClass, BaseTestClass)
        self.assertEqual(result, ValidSubclass)

    def test_get_impl_with_abstract_base_class(self):
        os.environ[self.test_env_var] = f"{__name__}.ConcreteTestClass"
        result = get_impl(self.test_env_var, AbstractTestClass, ConcreteTestClass)
        self.assertEqual(result, ConcreteTestClass)

    def test_get_impl_with_gateway(self):
        os.environ[self.test_env_var] = "claimy.mem.memory_gateway.MemoryGateway"
        result = get_impl(self.test_env_var, Gateway, MemoryGateway)
        self.assertEqual(result, MemoryGateway)

    def test_get_impl_wrong_base_type_raises_error(self):
        os.environ[self.test_env_var] = f"{__name__}.InvalidClass"
        with self.assertRaises(AssertionError):
            get_impl(self.test_env_var, BaseTestClass, ValidSubclass)

    def test_get_impl_default_wrong_base_type_raises_error(self):
        with self.assertRaises(AssertionError):
            get_impl(self.test_env_var, BaseTestClass, InvalidClass)

    def test_get_impl_invalid_module_raises_error(self):
        os.environ[self.test_env_var] = "nonexistent.module.Class"
        with self.assertRaises(ModuleNotFoundError):
            get_impl(self.test_env_var, BaseTestClass, ValidSubclass)

    def test_get_impl_invalid_class_raises_error(self):
        os.environ[self.test_env_var] = f"{__name__}.NonexistentClass"
        with self.assertRaises(AttributeError):
            get_impl(self.test_env_var, BaseTestClass, ValidSubclass)

    def test_import_from(self):
        self.assertIs(import_from("claimy.util.get_impl"), get_impl)


if __name__ == "__main__":
    unittest.main()
