"""Service layer for pagecapture.

This module provides the extraction services:
- ExtractService: Classify, extract and merge the selection (never raises)
- CommerceExtractor / ArticleExtractor / VideoExtractor / GenericExtractor:
  Per-category extraction over a page snapshot
- merge_selection: Selection merging and task-list detection
- parse_tasks / parse_recipe: Post-hoc re-parsers for saved text
"""

from pagecapture.services.article import ArticleExtractor
from pagecapture.services.base import CategoryExtractor
from pagecapture.services.classifier import classify
from pagecapture.services.commerce import CommerceExtractor
from pagecapture.services.extract import ExtractService
from pagecapture.services.generic import GenericExtractor, truncate
from pagecapture.services.reparse import parse_recipe, parse_recipe_info, parse_tasks, render_tasks, task_progress
from pagecapture.services.selection import merge_selection
from pagecapture.services.video import VideoExtractor

__all__ = [
    "ArticleExtractor",
    "CategoryExtractor",
    "CommerceExtractor",
    "ExtractService",
    "GenericExtractor",
    "VideoExtractor",
    "classify",
    "merge_selection",
    "parse_recipe",
    "parse_recipe_info",
    "parse_tasks",
    "render_tasks",
    "task_progress",
    "truncate",
]
