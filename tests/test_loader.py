"""
Unit tests for the module registry loader in sound.makin.backend.loader
"""

import pytest

from sound.makin.backend.loader import (
    LoadReport,
    list_modules,
    load_and_apply,
    module_slug,
)
from tests.test_helpers import write_modules


@pytest.fixture
def plugin_dir(tmp_path):
    return write_modules(
        tmp_path / "plugins",
        {
            "zeta.py": "NAME = 'zeta'\n",
            "alpha.py": "NAME = 'alpha'\n",
            "mid.v2.py": "NAME = 'mid'\n",
            "__init__.py": "",
            "_private.py": "raise RuntimeError('never imported')\n",
            "notes.txt": "not a module\n",
        },
    )


class TestModuleSlug:
    @pytest.mark.parametrize(
        "filename,slug",
        [
            ("users.py", "users"),
            ("index.py", "index"),
            ("users.admin.py", "users"),
            ("README", "README"),
        ],
    )
    def test_slug(self, filename, slug):
        assert module_slug(filename) == slug


class TestListModules:
    def test_sorted_and_filtered(self, plugin_dir):
        assert list_modules(str(plugin_dir)) == ["alpha.py", "mid.v2.py", "zeta.py"]

    def test_skips_directories(self, plugin_dir):
        (plugin_dir / "__pycache__").mkdir()
        (plugin_dir / "nested.py").mkdir()
        assert "nested.py" not in list_modules(str(plugin_dir))


class TestLoadAndApply:
    async def test_applies_in_sorted_order(self, plugin_dir):
        seen = []

        def apply_fn(module, filename):
            seen.append((filename, module.NAME))

        report = await load_and_apply(str(plugin_dir), apply_fn)

        assert seen == [("alpha.py", "alpha"), ("mid.v2.py", "mid"), ("zeta.py", "zeta")]
        assert report.loaded == ["alpha.py", "mid.v2.py", "zeta.py"]
        assert report.ok

    async def test_awaits_async_apply(self, plugin_dir):
        seen = []

        async def apply_fn(module, filename):
            seen.append(filename)

        report = await load_and_apply(str(plugin_dir), apply_fn)

        assert seen == ["alpha.py", "mid.v2.py", "zeta.py"]
        assert report.ok

    async def test_import_error_does_not_stop_later_files(self, tmp_path):
        directory = write_modules(
            tmp_path / "broken",
            {
                "a.py": "VALUE = 1\n",
                "b.py": "import does_not_exist_anywhere\n",
                "c.py": "VALUE = 3\n",
            },
        )
        seen = []

        report = await load_and_apply(
            str(directory), lambda module, filename: seen.append(module.VALUE)
        )

        assert seen == [1, 3]
        assert report.loaded == ["a.py", "c.py"]
        assert list(report.errors) == ["b.py"]
        assert "ModuleNotFoundError" in report.errors["b.py"]
        assert not report.ok

    async def test_apply_error_is_recorded(self, plugin_dir):
        def apply_fn(module, filename):
            if filename == "mid.v2.py":
                raise ValueError("bad module")

        report = await load_and_apply(str(plugin_dir), apply_fn)

        assert report.loaded == ["alpha.py", "zeta.py"]
        assert report.errors == {"mid.v2.py": "ValueError: bad module"}

    async def test_missing_directory(self, tmp_path):
        directory = str(tmp_path / "missing")

        report = await load_and_apply(directory, lambda module, filename: None)

        assert report.loaded == []
        assert list(report.errors) == [directory]
        assert "FileNotFoundError" in report.errors[directory]

    async def test_existing_report_is_extended(self, plugin_dir):
        report = LoadReport(directory="combined", loaded=["earlier.py"])

        result = await load_and_apply(
            str(plugin_dir), lambda module, filename: None, report
        )

        assert result is report
        assert report.loaded == ["earlier.py", "alpha.py", "mid.v2.py", "zeta.py"]

    async def test_summary(self, plugin_dir):
        report = await load_and_apply(str(plugin_dir), lambda module, filename: None)
        assert report.summary() == {
            "directory": str(plugin_dir),
            "loaded": ["alpha.py", "mid.v2.py", "zeta.py"],
            "errors": {},
        }
