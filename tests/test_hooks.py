"""Tests for the import system hook and end-to-end imports."""

import importlib
import sys

import pytest
from nsautoload.errors import HookRegistrationError
from nsautoload.hooks import AutoloadFinder
from nsautoload.hooks import MetaPathHost
from nsautoload.resolver import NamespaceResolver


class TestMetaPathHost:
    def test_register_appends_finder(self):
        meta_path = [object()]
        host = MetaPathHost(meta_path)

        def callback(name):
            return None

        host.register(callback)

        assert len(meta_path) == 2
        assert isinstance(meta_path[-1], AutoloadFinder)
        assert host.finder_for(callback) is meta_path[-1]

    def test_register_twice_is_ignored(self):
        meta_path = []
        host = MetaPathHost(meta_path)
        resolver = NamespaceResolver(host=host)

        assert resolver.register_handler()
        assert resolver.register_handler()

        assert len(meta_path) == 1

    def test_rejects_non_callable(self):
        host = MetaPathHost([])

        with pytest.raises(HookRegistrationError) as exc_info:
            host.register("not a function")
        assert exc_info.value.callback == "not a function"

    def test_unregister(self):
        meta_path = []
        host = MetaPathHost(meta_path)
        resolver = NamespaceResolver(host=host)
        resolver.register_handler()

        assert host.unregister(resolver.resolve_identifier) is True
        assert host.unregister(resolver.resolve_identifier) is False
        assert meta_path == []

    def test_defaults_to_sys_meta_path(self, isolated_meta_path):
        assert MetaPathHost().meta_path is sys.meta_path


class TestAutoloadFinder:
    def test_miss_returns_none(self):
        finder = AutoloadFinder(lambda name: None)

        assert finder.find_spec("Acme.Widget", None) is None

    def test_namespace_level_gets_package_spec(self):
        finder = AutoloadFinder(lambda name: None, packages=lambda name: name == "Acme")

        spec = finder.find_spec("Acme", None)

        assert spec.name == "Acme"
        assert spec.loader is None
        assert spec.submodule_search_locations == []

    def test_hit_returns_loaded_module_spec(self, tmp_path, make_module):
        make_module(tmp_path / "Widget.py")
        resolver = NamespaceResolver(host=MetaPathHost([]))
        resolver.add_namespace("Acme", tmp_path)
        finder = AutoloadFinder(resolver.resolve_identifier, resolver.is_package)

        spec = finder.find_spec("Acme.Widget", None)

        assert spec is sys.modules["Acme.Widget"].__spec__
        assert spec.origin == str(tmp_path / "Widget.py")


class TestImportStatement:
    @pytest.fixture
    def resolver(self, isolated_meta_path, tmp_path):
        resolver = NamespaceResolver()
        resolver.add_namespace("Acme.Billing", tmp_path / "billing")
        resolver.add_namespace("Acme", tmp_path / "acme")
        assert resolver.register_handler()
        return resolver

    def test_import_mapped_module(self, resolver, tmp_path, make_module, read_runs):
        make_module(tmp_path / "billing" / "Invoice.py", "TOTAL = 100")

        module = importlib.import_module("Acme.Billing.Invoice")

        assert module.TOTAL == 100
        assert module.__file__ == str(tmp_path / "billing" / "Invoice.py")
        assert read_runs() == ["Acme.Billing.Invoice"]

    def test_parent_levels_are_namespace_packages(self, resolver, tmp_path, make_module):
        make_module(tmp_path / "billing" / "Invoice.py")

        importlib.import_module("Acme.Billing.Invoice")

        assert sys.modules["Acme"].__path__ == []
        assert sys.modules["Acme.Billing"].Invoice is sys.modules["Acme.Billing.Invoice"]

    def test_import_through_subdirectory(self, resolver, tmp_path, make_module):
        make_module(tmp_path / "acme" / "Shipping" / "Label.py", "KIND = 'label'")

        from Acme.Shipping import Label

        assert Label.KIND == "label"

    def test_import_after_direct_resolution_does_not_reexecute(self, resolver, tmp_path, make_module, read_runs):
        make_module(tmp_path / "acme" / "Widget.py")

        assert resolver.resolve_identifier("Acme.Widget") == str(tmp_path / "acme" / "Widget.py")
        module = importlib.import_module("Acme.Widget")

        assert module is sys.modules["Acme.Widget"]
        assert read_runs() == ["Acme.Widget"]

    def test_reimport_after_removal_from_sys_modules(self, resolver, tmp_path, make_module, read_runs):
        make_module(tmp_path / "acme" / "Widget.py")
        module = importlib.import_module("Acme.Widget")
        del sys.modules["Acme.Widget"]

        assert importlib.import_module("Acme.Widget") is module
        assert read_runs() == ["Acme.Widget"]

    def test_module_with_sibling_directory_holds_submodules(self, resolver, tmp_path, make_module):
        make_module(tmp_path / "billing" / "Invoice.py", "KIND = 'invoice'")
        make_module(tmp_path / "billing" / "Invoice" / "Line.py", "KIND = 'line'")

        import Acme.Billing.Invoice.Line

        assert Acme.Billing.Invoice.KIND == "invoice"
        assert Acme.Billing.Invoice.Line.KIND == "line"
        assert Acme.Billing.Invoice.Line.__spec__.loader.registry is resolver.loader

    def test_loaded_module_can_import_siblings(self, resolver, tmp_path, make_module, read_runs):
        make_module(tmp_path / "billing" / "Tax.py", "RATE = 0.2")
        make_module(tmp_path / "billing" / "Invoice.py", "from Acme.Billing.Tax import RATE")

        module = importlib.import_module("Acme.Billing.Invoice")

        assert module.RATE == 0.2
        assert read_runs() == ["Acme.Billing.Invoice", "Acme.Billing.Tax"]

    def test_unmapped_import_still_fails(self, resolver):
        with pytest.raises(ModuleNotFoundError):
            importlib.import_module("Acme.Billing.DoesNotExist")
