"""
Test configuration for Kestrel tests
"""

import io
import sys
from pathlib import Path

import pytest

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import create_interpreter, create_root_env
from parsing import create_parser


@pytest.fixture
def output():
  """Captured program output"""
  return io.StringIO()


@pytest.fixture
def env(output):
  """Fresh global scope writing `print` output to the `output` fixture"""
  return create_root_env(output)


@pytest.fixture
def parser():
  return create_parser()


@pytest.fixture
def run():
  """Run a program and return everything it printed"""
  def _run(source: str) -> str:
    out = io.StringIO()
    create_interpreter(output=out).run_source(source)
    return out.getvalue()

  return _run
