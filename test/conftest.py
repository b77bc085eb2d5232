"""
Test configuration for the RPAL interpreter tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from parsing import create_parser
from semantics import standardize


@pytest.fixture
def parser():
  """Provide a fresh parser for each test"""
  return create_parser()


@pytest.fixture
def standardized(parser):
  """Parse and standardize a program text"""
  def build(source):
    return standardize(parser.parse_string(source))
  return build
