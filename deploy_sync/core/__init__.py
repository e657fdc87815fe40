"""Core deployment logic: change detection, packaging and metadata"""

from .path_filter import PathFilter, is_excluded
from .local_tree import LocalTree
from .change_resolver import ChangeSetResolver, classify_name_status, diff_hashes
from .package_builder import PackageBuilder
from .metadata_store import MetadataStore
from .command_parser import CommandOption, CommandSpec, parse_command

__all__ = [
    'PathFilter',
    'is_excluded',
    'LocalTree',
    'ChangeSetResolver',
    'classify_name_status',
    'diff_hashes',
    'PackageBuilder',
    'MetadataStore',
    'CommandOption',
    'CommandSpec',
    'parse_command',
]
