"""Sphinx configuration."""
import strbuilder

project = "strbuilder"
author = "strbuilder contributors"
copyright = f"2026, {author}"
release = version = strbuilder.__version__

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.doctest",
    "sphinx.ext.intersphinx",
    "sphinx.ext.napoleon",
]

autodoc_typehints = "none"
autodoc_member_order = "bysource"

intersphinx_mapping = {"python": ("https://docs.python.org/3", None)}
