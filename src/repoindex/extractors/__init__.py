"""Pattern extractors for the artifacts found in a repository.

Every extractor is a plain function taking decoded file text and returning a
small structured result. They match surface patterns with regular expressions
and never raise: text that does not match yields an empty result.

Usage:
    from repoindex.extractors import extract_class_names, extract_routes

    extract_class_names("class Foo {} class Bar {}")  # ["Foo", "Bar"]
    extract_routes("Route::get('/home', ...);")       # [Route("GET", "/home")]
"""

from repoindex.extractors.config_keys import extract_config_keys
from repoindex.extractors.routes import Route, extract_routes
from repoindex.extractors.schema import (
    extract_fillable_fields,
    extract_migration_operations,
    extract_relationships,
    extract_table_names,
)
from repoindex.extractors.symbols import extract_class_names, extract_function_names

__all__ = [
    "Route",
    "extract_class_names",
    "extract_config_keys",
    "extract_fillable_fields",
    "extract_function_names",
    "extract_migration_operations",
    "extract_relationships",
    "extract_routes",
    "extract_table_names",
]
