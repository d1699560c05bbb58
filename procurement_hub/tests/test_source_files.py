"""
Every module must compile cleanly; invalid escape sequences in docstrings
surface as SyntaxWarning on current interpreters.
"""
import warnings
from pathlib import Path

from django.test import SimpleTestCase

ROOT = Path(__file__).resolve().parents[2]
PACKAGES = ('core', 'procurement', 'procurement_hub')


class SourceCompileTests(SimpleTestCase):

    def test_modules_compile_without_warnings(self):
        sources = [path for package in PACKAGES for path in (ROOT / package).rglob('*.py')]
        self.assertTrue(sources)

        for path in sources:
            with self.subTest(path=str(path.relative_to(ROOT))):
                with warnings.catch_warnings():
                    warnings.simplefilter('error')
                    compile(path.read_text(encoding='utf-8'), str(path), 'exec')
