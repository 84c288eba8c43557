"""Rule files — filenames, editor formats, cache, and pull-to-disk."""

from bitcompass.rules.file_ops import pull_rule_to_file, resolve_output_dir
from bitcompass.rules.mdc_format import (
    build_content,
    build_rule_mdc_content,
    parse_rule_mdc_content,
)
from bitcompass.rules.slug import filename_for, title_to_slug

__all__ = [
    "build_content",
    "build_rule_mdc_content",
    "filename_for",
    "parse_rule_mdc_content",
    "pull_rule_to_file",
    "resolve_output_dir",
    "title_to_slug",
]
