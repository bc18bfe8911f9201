"""Core pipeline for Picshift."""

from picshift.core.pipeline import ItemFailure, OutputCollector, RunConfig, TransformPipeline
from picshift.core.selector import OutputRecord, measure_dimensions, real_base_name, select_output
from picshift.core.source import SourceResolver, assert_image, is_remote

__all__ = [
    "ItemFailure",
    "OutputCollector",
    "OutputRecord",
    "RunConfig",
    "SourceResolver",
    "TransformPipeline",
    "assert_image",
    "is_remote",
    "measure_dimensions",
    "real_base_name",
    "select_output",
]
