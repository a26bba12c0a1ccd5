# pylint: disable=missing-docstring

import pathlib
import tempfile
import textwrap
import unittest

import continuous_integration.check_setup

REPO_ROOT = pathlib.Path(__file__).parent.parent.parent


class Test_import_name(unittest.TestCase):
    def test_requirements(self) -> None:
        self.assertEqual(
            "more_itertools",
            continuous_integration.check_setup.import_name("more-itertools>=8"),
        )
        self.assertEqual(
            "tree_sitter_javascript",
            continuous_integration.check_setup.import_name(
                "tree-sitter-javascript>=0.21"
            ),
        )
        self.assertEqual(
            "icontract",
            continuous_integration.check_setup.import_name("icontract>=2.6.1,<3"),
        )

    def test_malformed(self) -> None:
        with self.assertRaises(ValueError):
            continuous_integration.check_setup.import_name(">=1.0")


class Test_imported_top_level_modules(unittest.TestCase):
    def test_absolute_and_relative_imports(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            package_dir = pathlib.Path(tmp_dir) / "some_package"
            (package_dir / "sub").mkdir(parents=True)
            (package_dir / "__init__.py").write_text(
                "import os.path\nfrom icontract import require\n", encoding="utf-8"
            )
            (package_dir / "sub" / "module.py").write_text(
                textwrap.dedent(
                    """\
                    from . import something
                    from some_package.sub import other


                    def do() -> None:
                        import tree_sitter
                    """
                ),
                encoding="utf-8",
            )

            self.assertSetEqual(
                {"os", "icontract", "some_package", "tree_sitter"},
                continuous_integration.check_setup.imported_top_level_modules(
                    package_dir
                ),
            )


class Test_parse_setup_keywords(unittest.TestCase):
    def test_on_setup_py_of_the_repository(self) -> None:
        keywords = continuous_integration.check_setup.parse_setup_keywords(
            REPO_ROOT / "setup.py"
        )

        self.assertSetEqual(
            set(continuous_integration.check_setup.CHECKED_KEYWORDS), set(keywords)
        )
        self.assertIn("dev", keywords["extras_require"])

    def test_computed_arguments_are_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            setup_py = pathlib.Path(tmp_dir) / "setup.py"
            setup_py.write_text(
                textwrap.dedent(
                    """\
                    from setuptools import find_packages, setup

                    setup(
                        name="something",
                        version="1.2.3",
                        packages=find_packages(),
                    )
                    """
                ),
                encoding="utf-8",
            )

            self.assertDictEqual(
                {"version": "1.2.3"},
                continuous_integration.check_setup.parse_setup_keywords(setup_py),
            )


class Test_main(unittest.TestCase):
    def test_repository_passes(self) -> None:
        self.assertEqual(0, continuous_integration.check_setup.main())


if __name__ == "__main__":
    unittest.main()
